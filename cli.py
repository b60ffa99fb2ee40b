from __future__ import annotations

import argparse
import logging
import sys
import time

import requests

from elbsim.server import ELBServer
from elbsim.settings import settings


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"Invalid field {pair!r}, expected KEY=VALUE")
        fields[key] = value
    return fields


def serve(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    srv = ELBServer(host=args.host, port=args.port, journal_path=args.journal)
    srv.start()
    for _ in range(args.instances):
        print(f"instance {srv.new_instance()}")
    for name in args.load_balancer or []:
        print(f"load balancer {name} {srv.new_load_balancer(name)}")
    print(srv.url, flush=True)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        srv.stop()
    return 0


def call(args: argparse.Namespace) -> int:
    fields = _parse_fields(args.fields)
    fields["Action"] = args.action
    r = requests.post(args.api, data=fields, timeout=10)
    print(r.text)
    return 0 if r.ok else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="ELB simulator")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_serve = sub.add_parser("serve", help="Run the simulator in the foreground")
    s_serve.add_argument("--host", default=settings.host)
    s_serve.add_argument("--port", type=int, default=settings.port or 8000)
    s_serve.add_argument("--journal", default=settings.journal_path, help="sqlite path for the request journal")
    s_serve.add_argument("--log-level", default=settings.log_level)
    s_serve.add_argument("--instances", type=int, default=0, help="Number of instances to create at startup")
    s_serve.add_argument("--load-balancer", action="append", help="Pre-create a load balancer (repeatable)")

    s_call = sub.add_parser("call", help="Call an action on a running simulator")
    s_call.add_argument("--api", default="http://localhost:8000", help="Simulator base URL")
    s_call.add_argument("action", help="Action name, e.g. DescribeLoadBalancers")
    s_call.add_argument("fields", nargs="*", help="Request fields as KEY=VALUE")

    args = p.parse_args(argv)

    if args.cmd == "serve":
        return serve(args)
    if args.cmd == "call":
        return call(args)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
