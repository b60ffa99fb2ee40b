from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable

from .actions import ACTIONS, Action, ActionRequest
from .errors import ELBError, unrecognized_action
from .forms import Form
from .journal import Journal
from .settings import settings
from .store import ModelStore
from .xmlwire import render_error, render_response

logger = logging.getLogger(__name__)

DEFECT_EXIT_CODE = 70


def abort_process(exc: BaseException) -> None:
    os._exit(DEFECT_EXIT_CODE)


@dataclass(frozen=True)
class Reply:
    status_code: int
    body: bytes
    request_id: str


class Dispatcher:
    """Routes an action to its handler and renders the reply.

    The store lock is held for the whole request. Provider errors
    (``ELBError``) become error envelopes; any other exception means the
    simulator itself is broken and ``on_defect`` is called with it.
    """

    def __init__(
        self,
        store: ModelStore,
        journal: Journal,
        on_defect: Callable[[BaseException], None] | None = None,
    ) -> None:
        self.store = store
        self.journal = journal
        if on_defect is None:
            on_defect = abort_process if settings.abort_on_defect else None
        self.on_defect = on_defect
        self.actions: dict[str, Action] = {name: cls(store) for name, cls in ACTIONS.items()}

    def dispatch(self, form: Form) -> Reply:
        action_name = form.value("Action")
        with self.store.lock:
            request_id = self.store.next_request_id()
            try:
                reply = self._handle(action_name, request_id, form)
            except Exception as exc:
                logger.critical("Unhandled error in %s (%s)", action_name or "<none>", request_id, exc_info=True)
                if self.on_defect is not None:
                    self.on_defect(exc)
                raise
        return reply

    def _handle(self, action_name: str, request_id: str, form: Form) -> Reply:
        logger.debug("%s %s", request_id, action_name)
        try:
            action = self.actions.get(action_name)
            if action is None:
                raise unrecognized_action()
            induced = self.store.induced_error(action_name)
            if induced is not None:
                raise ELBError(induced.code, induced.message, induced.status_code)
            result = action.handle(ActionRequest(action=action_name, request_id=request_id, form=form))
        except ELBError as err:
            logger.info("%s %s failed: %s %s", request_id, action_name, err.code, err.message)
            self.journal.record(request_id, action_name, err.status_code, err.code)
            return Reply(err.status_code, render_error(err, request_id), request_id)

        body = render_response(action_name, request_id, result)
        self.journal.record(request_id, action_name, 200)
        return Reply(200, body, request_id)
