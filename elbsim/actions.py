from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .api_models import (
    ConfigureHealthCheckResult,
    CreateLoadBalancerResult,
    DescribeInstanceHealthResult,
    DescribeLoadBalancersResult,
    HealthCheck,
    InstanceRef,
    InstanceState,
    Listener,
    ListenerDescription,
    LoadBalancerDescription,
    RegisterInstancesWithLoadBalancerResult,
    SourceSecurityGroup,
    WireModel,
)
from .errors import invalid_instance, load_balancer_not_found, validation_error
from .forms import Form, member_fields, member_values
from .settings import settings
from .store import ModelStore
from .validators import validate_composition, validate_required

HEALTH_CHECK_TARGET_RE = re.compile(r"\w+:\d+/+")
INTEGER_RE = re.compile(r"-?[0-9]+")

INSTANCES = "Instances"
INSTANCE_ID = "InstanceId"


@dataclass(frozen=True)
class ActionRequest:
    action: str
    request_id: str
    form: Form


class Action(ABC):
    """One supported API action."""

    def __init__(self, store: ModelStore) -> None:
        self.store = store

    @abstractmethod
    def handle(self, req: ActionRequest) -> WireModel | None:
        """Return the action result, ``None`` for a bare acknowledgement.

        Raises ``ELBError`` for anything the caller did wrong.
        """

    def require_load_balancer(self, name: str) -> None:
        if not self.store.lb_exists(name):
            raise load_balancer_not_found(name)

    def require_instances(self, form: Form) -> list[str]:
        """Check every ``Instances.member.N.InstanceId``; fail on the first unknown."""
        instance_ids = []
        for _, instance_id in member_values(form, INSTANCES, INSTANCE_ID):
            if not self.store.instance_exists(instance_id):
                raise invalid_instance(instance_id)
            instance_ids.append(instance_id)
        return instance_ids


def _int_or(raw: str, default: int) -> int:
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def health_check_from(form: Form) -> HealthCheck:
    """Build a health check from ``HealthCheck.*`` fields, defaulting each one."""
    hc = HealthCheck()
    return HealthCheck(
        target=form.value("HealthCheck.Target") or hc.target,
        interval=_int_or(form.value("HealthCheck.Interval"), hc.interval),
        timeout=_int_or(form.value("HealthCheck.Timeout"), hc.timeout),
        unhealthy_threshold=_int_or(form.value("HealthCheck.UnhealthyThreshold"), hc.unhealthy_threshold),
        healthy_threshold=_int_or(form.value("HealthCheck.HealthyThreshold"), hc.healthy_threshold),
    )


def source_security_group_from(form: Form) -> SourceSecurityGroup:
    sg = SourceSecurityGroup()
    return SourceSecurityGroup(
        owner_alias=form.value("SourceSecurityGroup.OwnerAlias") or sg.owner_alias,
        group_name=form.value("SourceSecurityGroup.GroupName") or sg.group_name,
    )


class CreateLoadBalancer(Action):
    composition = [("AvailabilityZones.member.1", "Subnets.member.1")]
    required = [
        "Listeners.member.1.InstancePort",
        "Listeners.member.1.InstanceProtocol",
        "Listeners.member.1.Protocol",
        "Listeners.member.1.LoadBalancerPort",
        "LoadBalancerName",
    ]

    def handle(self, req: ActionRequest) -> CreateLoadBalancerResult:
        validate_composition(req.form, self.composition)
        validate_required(req.form, self.required)
        fields = dict(req.form)
        if not fields.get("Path"):
            fields["Path"] = "/"
        dns_name = self.store.create_load_balancer(req.form.value("LoadBalancerName"), Form(fields))
        return CreateLoadBalancerResult(dns_name=dns_name)


class DeleteLoadBalancer(Action):
    def handle(self, req: ActionRequest) -> None:
        validate_required(req.form, ["LoadBalancerName"])
        # Deleting an unknown load balancer is not an error.
        self.store.remove_load_balancer(req.form.value("LoadBalancerName"))
        return None


class RegisterInstancesWithLoadBalancer(Action):
    def handle(self, req: ActionRequest) -> RegisterInstancesWithLoadBalancerResult:
        validate_required(req.form, ["LoadBalancerName", "Instances.member.1.InstanceId"])
        self.require_load_balancer(req.form.value("LoadBalancerName"))
        instance_ids = self.require_instances(req.form)
        return RegisterInstancesWithLoadBalancerResult(instances=[InstanceRef(instance_id=i) for i in instance_ids])


class DeregisterInstancesFromLoadBalancer(Action):
    def handle(self, req: ActionRequest) -> None:
        validate_required(req.form, ["LoadBalancerName"])
        self.require_load_balancer(req.form.value("LoadBalancerName"))
        self.require_instances(req.form)
        return None


class DescribeLoadBalancers(Action):
    """Describe every known load balancer.

    Requested names are only checked for existence; the result always lists
    all load balancers. Those created through the API are described from
    their stored create request, those added with ``new_load_balancer`` get
    a minimal description.
    """

    def handle(self, req: ActionRequest) -> DescribeLoadBalancersResult:
        for _, name in member_values(req.form, "LoadBalancerNames"):
            self.require_load_balancer(name)

        descriptions = [self.describe(name, form) for name, form in self.store.configured().items()]
        for name in self.store.legacy_names():
            descriptions.append(
                LoadBalancerDescription(
                    load_balancer_name=name,
                    dns_name=self.store.dns_name(name),
                    availability_zones=[settings.default_zone],
                    health_check=HealthCheck(),
                )
            )
        return DescribeLoadBalancersResult(load_balancer_descriptions=descriptions)

    def describe(self, name: str, form: Form) -> LoadBalancerDescription:
        listeners = []
        for _, member in member_fields(form, "Listeners", "Protocol"):
            listeners.append(
                ListenerDescription(
                    listener=Listener(
                        protocol=member.value("Protocol").upper(),
                        load_balancer_port=_int_or(member.value("LoadBalancerPort"), 0),
                        instance_protocol=member.value("InstanceProtocol").upper(),
                        instance_port=_int_or(member.value("InstancePort"), 0),
                    )
                )
            )
        return LoadBalancerDescription(
            load_balancer_name=name,
            dns_name=self.store.dns_name(name),
            availability_zones=[z for _, z in member_values(form, "AvailabilityZones")],
            subnets=[s for _, s in member_values(form, "Subnets")],
            listener_descriptions=listeners,
            health_check=health_check_from(form),
            source_security_group=source_security_group_from(form),
            scheme=form.value("Scheme") or "internet-facing",
        )


class DescribeInstanceHealth(Action):
    def handle(self, req: ActionRequest) -> DescribeInstanceHealthResult:
        self.require_load_balancer(req.form.value("LoadBalancerName"))
        # Health transitions are not simulated; every instance stays pending.
        states = [InstanceState(instance_id=i) for i in self.require_instances(req.form)]
        return DescribeInstanceHealthResult(instance_states=states)


class ConfigureHealthCheck(Action):
    required = [
        "LoadBalancerName",
        "HealthCheck.HealthyThreshold",
        "HealthCheck.Interval",
        "HealthCheck.Target",
        "HealthCheck.Timeout",
        "HealthCheck.UnhealthyThreshold",
    ]
    numeric = [
        "HealthCheck.HealthyThreshold",
        "HealthCheck.Interval",
        "HealthCheck.Timeout",
        "HealthCheck.UnhealthyThreshold",
    ]

    def handle(self, req: ActionRequest) -> ConfigureHealthCheckResult:
        validate_required(req.form, self.required)
        self.require_load_balancer(req.form.value("LoadBalancerName"))
        if not HEALTH_CHECK_TARGET_RE.search(req.form.value("HealthCheck.Target")):
            raise validation_error(
                "HealthCheck HTTP Target must specify a port followed by a path that begins with a slash. "
                "e.g. HTTP:80/ping/this/path"
            )
        for field in self.numeric:
            if not INTEGER_RE.fullmatch(req.form.value(field)):
                raise validation_error(f"{field} must be an integer.")
        # The stored create request is left untouched.
        return ConfigureHealthCheckResult(health_check=health_check_from(req.form))


ACTIONS: dict[str, type[Action]] = {
    "CreateLoadBalancer": CreateLoadBalancer,
    "DeleteLoadBalancer": DeleteLoadBalancer,
    "RegisterInstancesWithLoadBalancer": RegisterInstancesWithLoadBalancer,
    "DeregisterInstancesFromLoadBalancer": DeregisterInstancesFromLoadBalancer,
    "DescribeLoadBalancers": DescribeLoadBalancers,
    "DescribeInstanceHealth": DescribeInstanceHealth,
    "ConfigureHealthCheck": ConfigureHealthCheck,
}
