import os
import sys
import xml.etree.ElementTree as ET

import pytest
from fastapi.testclient import TestClient

# Ensure project root is importable (so `import elbsim` works without installing)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from elbsim.app import create_app  # noqa: E402
from elbsim.dispatcher import Dispatcher  # noqa: E402
from elbsim.journal import Journal  # noqa: E402
from elbsim.store import ModelStore  # noqa: E402


def strip_ns(root: ET.Element) -> ET.Element:
    for el in root.iter():
        if "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]
    return root


class ApiResult:
    def __init__(self, status_code: int, body: bytes):
        self.status_code = status_code
        self.root = strip_ns(ET.fromstring(body))

    def text(self, path: str) -> str | None:
        el = self.root.find(path)
        return None if el is None else el.text

    def texts(self, path: str) -> list[str]:
        return [el.text or "" for el in self.root.findall(path)]

    @property
    def error_code(self) -> str | None:
        return self.text("Error/Code")

    @property
    def error_message(self) -> str | None:
        return self.text("Error/Message")


@pytest.fixture
def store():
    return ModelStore()


@pytest.fixture
def journal():
    j = Journal(":memory:")
    yield j
    j.close()


@pytest.fixture
def defects():
    """Exceptions passed to the dispatcher's defect hook instead of exiting."""
    return []


@pytest.fixture
def dispatcher(store, journal, defects):
    return Dispatcher(store, journal, on_defect=defects.append)


@pytest.fixture
def client(dispatcher):
    return TestClient(create_app(dispatcher))


@pytest.fixture
def api(client):
    """POST a form request and return the parsed XML reply."""

    def _call(action: str, **fields: str) -> ApiResult:
        r = client.post("/", data={"Action": action, **fields})
        return ApiResult(r.status_code, r.content)

    return _call


@pytest.fixture
def test_lb(api):
    r = api(
        "CreateLoadBalancer",
        **{
            "LoadBalancerName": "test-lb",
            "AvailabilityZones.member.1": "us-east-1a",
            "Listeners.member.1.InstancePort": "8080",
            "Listeners.member.1.InstanceProtocol": "http",
            "Listeners.member.1.Protocol": "http",
            "Listeners.member.1.LoadBalancerPort": "80",
        },
    )
    assert r.status_code == 200
    return "test-lb"
