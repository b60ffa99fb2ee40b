from __future__ import annotations

from urllib.parse import parse_qsl

from fastapi import FastAPI, Request, Response

from .dispatcher import Dispatcher
from .forms import Form
from .journal import Journal
from .store import ModelStore
from .xmlwire import CONTENT_TYPE

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


async def read_form(request: Request) -> Form:
    """Merge the urlencoded body and the query string, body first."""
    pairs: list[tuple[str, str]] = []
    if request.method == "POST" and request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPE):
        body = (await request.body()).decode("utf-8", errors="replace")
        pairs.extend(parse_qsl(body, keep_blank_values=True))
    pairs.extend(request.query_params.multi_items())
    return Form(pairs)


def create_app(dispatcher: Dispatcher | None = None) -> FastAPI:
    if dispatcher is None:
        dispatcher = Dispatcher(ModelStore(), Journal())

    app = FastAPI(title="ELB Simulator")
    app.state.dispatcher = dispatcher

    @app.api_route("/", methods=["GET", "POST"])
    async def query_api(request: Request) -> Response:
        reply = dispatcher.dispatch(await read_form(request))
        return Response(
            content=reply.body,
            status_code=reply.status_code,
            media_type=CONTENT_TYPE,
            headers={"x-amzn-RequestId": reply.request_id},
        )

    return app
