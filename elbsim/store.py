from __future__ import annotations

from threading import RLock

from .errors import ELBError
from .forms import Form
from .settings import settings


class ModelStore:
    """In-memory state of the simulated provider.

    Every read and write goes through ``lock``. The dispatcher holds it for
    the whole of a request, so requests never observe each other's partial
    state; the lock is reentrant so the methods below can be used while it
    is held.
    """

    def __init__(self, region: str | None = None) -> None:
        self.lock = RLock()
        self.region = region or settings.region
        self.dns_names: dict[str, str] = {}  # lb name -> dns name
        self.lb_forms: dict[str, Form] = {}  # lb name -> create request
        self.instance_ids: list[str] = []
        self.instance_count = 0
        self.request_count = 0
        self.induced: dict[str, ELBError] = {}  # action -> error

    # Load balancers

    def create_load_balancer(self, name: str, fields: Form) -> str:
        with self.lock:
            self.lb_forms.pop(name, None)
            self.lb_forms[name] = Form(fields)
            self.dns_names[name] = f"{name}-some-aws-stuff.{self.region}.elb.amazonaws.com"
            return self.dns_names[name]

    def new_load_balancer(self, name: str) -> str:
        """Register a load balancer with no stored configuration."""
        with self.lock:
            self.dns_names[name] = f"{name}-some-aws-stuff.sa-east-1.amazonaws.com"
            return self.dns_names[name]

    def remove_load_balancer(self, name: str) -> None:
        with self.lock:
            self.dns_names.pop(name, None)
            self.lb_forms.pop(name, None)

    def lb_exists(self, name: str) -> bool:
        with self.lock:
            return name in self.dns_names

    def dns_name(self, name: str) -> str:
        with self.lock:
            return self.dns_names.get(name, "")

    def configured(self) -> dict[str, Form]:
        with self.lock:
            return dict(self.lb_forms)

    def legacy_names(self) -> list[str]:
        with self.lock:
            return [n for n in self.dns_names if n not in self.lb_forms]

    # Instances

    def create_instance(self) -> str:
        with self.lock:
            self.instance_count += 1
            instance_id = f"i-{self.instance_count}"
            self.instance_ids.append(instance_id)
            return instance_id

    def remove_instance(self, instance_id: str) -> None:
        with self.lock:
            if instance_id in self.instance_ids:
                self.instance_ids.remove(instance_id)

    def instance_exists(self, instance_id: str) -> bool:
        with self.lock:
            return instance_id in self.instance_ids

    def instances(self) -> list[str]:
        with self.lock:
            return list(self.instance_ids)

    # Requests

    def next_request_id(self) -> str:
        with self.lock:
            request_id = f"req{self.request_count:08X}"
            self.request_count += 1
            return request_id

    def induce_error(self, action: str, error: ELBError) -> None:
        with self.lock:
            self.induced[action] = error

    def induced_error(self, action: str) -> ELBError | None:
        with self.lock:
            return self.induced.get(action)

    def clear_induced_errors(self, action: str | None = None) -> None:
        with self.lock:
            if action is None:
                self.induced.clear()
            else:
                self.induced.pop(action, None)
