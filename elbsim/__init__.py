"""ELB Simulator.

In-process fake of the Elastic Load Balancing query API for tests:
 - form-encoded requests in, provider-shaped XML responses and errors out
 - in-memory load balancers, instances and health checks
 - a request journal and per-action error injection for assertions

    from elbsim import ELBServer

    with ELBServer() as srv:
        srv.new_instance()
        ...  # point the client under test at srv.url
"""
from .errors import ELBError
from .server import ELBServer

__all__ = ["ELBError", "ELBServer"]
