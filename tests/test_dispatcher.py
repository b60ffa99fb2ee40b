import threading

import pytest

from elbsim.dispatcher import Dispatcher, abort_process
from elbsim.forms import Form
from elbsim.xmlwire import NAMESPACE


class _Broken:
    def handle(self, req):
        raise RuntimeError("handler bug")


def test_unknown_action_is_invalid_parameter_value(api):
    r = api("CreateRocket")
    assert r.status_code == 400
    assert r.root.tag == "ErrorResponse"
    assert r.text("Error/Type") == "Sender"
    assert r.error_code == "InvalidParameterValue"
    assert r.error_message == "Unrecognized Action"
    assert r.text("RequestId") == "req00000000"


def test_missing_action_is_invalid_parameter_value(client):
    r = client.get("/")
    assert r.status_code == 400
    assert b"InvalidParameterValue" in r.content


def test_query_string_requests_are_accepted(client):
    r = client.get("/", params={"Action": "DescribeLoadBalancers"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/xml")
    assert r.headers["x-amzn-requestid"] == "req00000000"
    assert NAMESPACE.encode() in r.content


def test_body_fields_take_precedence_over_query(client):
    r = client.post("/", params={"Action": "CreateRocket"}, data={"Action": "DescribeLoadBalancers"})
    assert r.status_code == 200


def test_request_ids_increase_across_success_and_failure(api):
    ids = [
        api("DescribeLoadBalancers").text("ResponseMetadata/RequestId"),
        api("Bogus").text("RequestId"),
        api("DescribeLoadBalancers").text("ResponseMetadata/RequestId"),
    ]
    assert ids == ["req00000000", "req00000001", "req00000002"]


def test_induced_error_is_returned_until_cleared(api, store):
    from elbsim.errors import ELBError

    store.induce_error("DescribeLoadBalancers", ELBError("Throttling", "Rate exceeded"))
    for _ in range(2):
        r = api("DescribeLoadBalancers")
        assert r.status_code == 400
        assert r.error_code == "Throttling"
        assert r.error_message == "Rate exceeded"
    assert api("DescribeInstanceHealth", LoadBalancerName="x").error_code == "LoadBalancerNotFound"

    store.clear_induced_errors("DescribeLoadBalancers")
    assert api("DescribeLoadBalancers").status_code == 200


def test_induced_error_does_not_mutate(api, store):
    from elbsim.errors import ELBError

    store.induce_error("CreateLoadBalancer", ELBError("ServiceUnavailable", "try later", status_code=503))
    r = api(
        "CreateLoadBalancer",
        LoadBalancerName="lb",
        **{
            "Subnets.member.1": "s",
            "Listeners.member.1.InstancePort": "80",
            "Listeners.member.1.InstanceProtocol": "http",
            "Listeners.member.1.Protocol": "http",
            "Listeners.member.1.LoadBalancerPort": "80",
        },
    )
    assert r.status_code == 503
    assert not store.lb_exists("lb")


def test_defect_calls_hook_and_propagates(dispatcher, store, defects):
    dispatcher.actions["DescribeLoadBalancers"] = _Broken()
    with pytest.raises(RuntimeError):
        dispatcher.dispatch(Form({"Action": "DescribeLoadBalancers"}))
    assert len(defects) == 1
    assert str(defects[0]) == "handler bug"
    # the lock is released afterwards
    acquired = []

    def probe():
        got = store.lock.acquire(blocking=False)
        acquired.append(got)
        if got:
            store.lock.release()

    t = threading.Thread(target=probe)
    t.start()
    t.join()
    assert acquired == [True]


def test_journal_records_outcomes(api, journal):
    api("DescribeLoadBalancers")
    api("DeleteLoadBalancer")
    api("Nope")
    entries = journal.entries()
    assert [(e.action, e.status_code, e.error_code) for e in entries] == [
        ("DescribeLoadBalancers", 200, None),
        ("DeleteLoadBalancer", 400, "ValidationError"),
        ("Nope", 400, "InvalidParameterValue"),
    ]
    assert [e.request_id for e in entries] == ["req00000000", "req00000001", "req00000002"]
    assert [e.action for e in journal.entries("DeleteLoadBalancer")] == ["DeleteLoadBalancer"]


def test_default_defect_hook_follows_settings(store, journal, monkeypatch):
    from elbsim import dispatcher as dispatcher_mod
    from elbsim.settings import Settings

    monkeypatch.setattr(dispatcher_mod, "settings", Settings(abort_on_defect=True))
    assert Dispatcher(store, journal).on_defect is abort_process

    monkeypatch.setattr(dispatcher_mod, "settings", Settings(abort_on_defect=False))
    d = Dispatcher(store, journal)
    assert d.on_defect is None
    d.actions["DescribeLoadBalancers"] = _Broken()
    with pytest.raises(RuntimeError):
        d.dispatch(Form({"Action": "DescribeLoadBalancers"}))


def test_control_characters_in_error_message_stay_well_formed(api):
    r = api("DescribeLoadBalancers", **{"LoadBalancerNames.member.1": "a\x01b"})
    assert r.status_code == 400
    assert r.error_code == "LoadBalancerNotFound"
    assert r.error_message == "There is no ACTIVE Load Balancer named 'a\ufffdb'"


def test_non_utf8_body_gets_error_envelope(client, journal):
    r = client.post(
        "/",
        content=b"Action=DescribeLoadBalancers&LoadBalancerNames.member.1=\xff",
        headers={"content-type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 400
    assert b"LoadBalancerNotFound" in r.content
    assert [(e.action, e.error_code) for e in journal.entries()] == [("DescribeLoadBalancers", "LoadBalancerNotFound")]
