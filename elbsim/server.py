from __future__ import annotations

import logging
import socket
import time
from threading import Thread
from typing import Callable

import uvicorn

from .app import create_app
from .dispatcher import Dispatcher
from .errors import ELBError
from .journal import Journal, JournalEntry
from .settings import settings
from .store import ModelStore

logger = logging.getLogger(__name__)


class ELBServer:
    """A simulated load-balancer endpoint for tests.

    Usage::

        with ELBServer() as srv:
            instance_id = srv.new_instance()
            client = SomeELBClient(endpoint=srv.url)
            ...

    The harness methods (``new_instance``, ``new_load_balancer`` and friends)
    change the model directly, without going through request validation.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        region: str | None = None,
        journal_path: str | None = None,
        on_defect: Callable[[BaseException], None] | None = None,
    ) -> None:
        self.host = host or settings.host
        self.port = settings.port if port is None else port
        self.store = ModelStore(region)
        self.journal = Journal(journal_path)
        self.dispatcher = Dispatcher(self.store, self.journal, on_defect)
        self.app = create_app(self.dispatcher)
        self.url = ""
        self._server: uvicorn.Server | None = None
        self._thr: Thread | None = None

    # Lifecycle

    def start(self) -> str:
        if self._thr and self._thr.is_alive():
            return self.url
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((self.host, self.port))
        host, port = sock.getsockname()[:2]

        config = uvicorn.Config(self.app, log_level="warning", lifespan="off", access_log=False)
        self._server = uvicorn.Server(config)
        self._thr = Thread(target=self._server.run, kwargs={"sockets": [sock]}, daemon=True)
        self._thr.start()

        deadline = time.monotonic() + settings.startup_timeout_s
        while not self._server.started:
            if not self._thr.is_alive() or time.monotonic() > deadline:
                self._server.should_exit = True
                sock.close()
                raise RuntimeError(f"ELB simulator did not start on {host}:{port}")
            time.sleep(0.01)

        self.url = f"http://{host}:{port}"
        logger.info("ELB simulator listening on %s", self.url)
        return self.url

    def stop(self) -> None:
        """Close the listener. In-flight requests are not drained."""
        if self._server is None:
            return
        self._server.should_exit = True
        if self._thr is not None:
            self._thr.join(timeout=settings.startup_timeout_s)
        logger.info("ELB simulator on %s stopped", self.url)
        self._server = None
        self._thr = None

    def __enter__(self) -> "ELBServer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # Harness

    def new_instance(self) -> str:
        return self.store.create_instance()

    def remove_instance(self, instance_id: str) -> None:
        self.store.remove_instance(instance_id)

    def new_load_balancer(self, name: str) -> str:
        return self.store.new_load_balancer(name)

    def remove_load_balancer(self, name: str) -> None:
        self.store.remove_load_balancer(name)

    def induce_error(self, action: str, code: str, message: str, status_code: int = 400) -> None:
        """Make every ``action`` request fail with the given error until cleared."""
        self.store.induce_error(action, ELBError(code, message, status_code))

    def clear_induced_errors(self, action: str | None = None) -> None:
        self.store.clear_induced_errors(action)

    def requests(self, action: str | None = None) -> list[JournalEntry]:
        with self.store.lock:
            return self.journal.entries(action)
