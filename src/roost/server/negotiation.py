"""Content negotiation — maps return values to Response objects.

Handlers (and controller methods) return whatever reads naturally; this
module turns it into a ``Response``. isinstance-based dispatch, no magic,
fully predictable.
"""

import json as json_module
from typing import Any

from kida import Environment

from roost.errors import ConfigurationError
from roost.http.response import Redirect, Response
from roost.templating.integration import render_inline, render_template
from roost.templating.returns import InlineTemplate, Template


def _html_response(body: str) -> Response:
    return Response(body=body, content_type="text/html; charset=utf-8")


def negotiate(value: Any, *, kida_env: Environment | None = None) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``Redirect``            -> 3xx with Location header
    3. ``Template``            -> render via kida -> 200 text/html
    4. ``InlineTemplate``      -> compile + render via kida
    5. ``str``                 -> 200, text/html
    6. ``bytes``               -> 200, application/octet-stream
    7. ``dict`` / ``list``     -> 200, application/json
    8. ``None``                -> 200 with an empty body
    9. ``(value, int)``        -> negotiate value, override status
    10. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return Response(body="").with_status(value.status).with_header("Location", value.url)
        case Template():
            if kida_env is None:
                msg = (
                    "Template return type requires kida integration. "
                    "Ensure a template_dir is configured in AppConfig."
                )
                raise ConfigurationError(msg)
            return _html_response(render_template(kida_env, value))
        case InlineTemplate():
            return _html_response(render_inline(kida_env or Environment(), value))
        case str():
            return _html_response(value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case None:
            return Response(body="")
        case (body, int() as status):
            return negotiate(body, kida_env=kida_env).with_status(status)
        case (body, int() as status, dict() as headers):
            response = negotiate(body, kida_env=kida_env).with_status(status)
            for name, header_value in headers.items():
                response = response.with_header(name, str(header_value))
            return response
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a Response, Redirect, Template, str, bytes, dict, or list."
            )
            raise TypeError(msg)
