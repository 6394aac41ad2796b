"""Immutable HTTP request.

Frozen metadata with async body access. Routing only ever looks at
``path``; the method is carried for handlers and logging.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from roost._internal.asgi import Receive, Scope
from roost.http.cookies import parse_cookies
from roost.http.forms import FormData, parse_form_data
from roost.http.headers import Headers
from roost.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Cookies are parsed once in ``from_asgi`` and stored as a frozen field.
    The body is read lazily through ``body()``, ``form()``, ``text()`` or
    ``json()`` and cached after the first read.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    cookies: Mapping[str, str]
    root_path: str = ""
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield the body in the chunks the server delivers."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full request body (cached)."""
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def form(self) -> FormData:
        """Parse the body as URL-encoded or multipart form data (cached).

        Raises ``ValueError`` if the Content-Type is not a form encoding.
        """
        if "form" not in self._cache:
            content_type = self.content_type or "application/x-www-form-urlencoded"
            self._cache["form"] = parse_form_data(await self.body(), content_type)
        return self._cache["form"]

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive | None = None) -> Request:
        """Build a Request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            cookies=parse_cookies(headers.get("cookie", "")),
            root_path=scope.get("root_path", ""),
            client=tuple(client) if client else None,
            _receive=receive,
        )
