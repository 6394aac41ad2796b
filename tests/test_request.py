"""Tests for Request, Headers, and QueryParams."""

import pytest

from roost.http.headers import Headers
from roost.http.query import QueryParams
from roost.http.request import Request


def make_scope(**overrides: object) -> dict:
    scope: dict = {
        "type": "http",
        "method": "GET",
        "path": "/items",
        "query_string": b"",
        "headers": [],
    }
    scope.update(overrides)
    return scope


def body_receiver(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict:
        return messages.pop(0)

    return receive


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/plain"),))
        assert headers["content-type"] == "text/plain"
        assert "CONTENT-TYPE" in headers

    def test_repeated_names(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("accept") == ["a", "b"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x-missing") is None
        assert headers.get_list("x-missing") == []
        assert 42 not in headers


class TestQueryParams:
    def test_first_value(self) -> None:
        query = QueryParams(b"tag=a&tag=b&page=2")
        assert query["tag"] == "a"
        assert query.get_list("tag") == ["a", "b"]
        assert query["page"] == "2"

    def test_blank_values_kept(self) -> None:
        assert QueryParams(b"q=")["q"] == ""

    def test_empty(self) -> None:
        assert len(QueryParams()) == 0


class TestRequest:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(
            make_scope(
                method="POST",
                query_string=b"page=3",
                headers=[(b"cookie", b"a=1; b=2"), (b"content-type", b"text/plain")],
                client=("10.0.0.1", 5000),
            )
        )
        assert request.method == "POST"
        assert request.path == "/items"
        assert request.query["page"] == "3"
        assert request.cookies == {"a": "1", "b": "2"}
        assert request.content_type == "text/plain"
        assert request.client == ("10.0.0.1", 5000)
        assert request.url == "/items?page=3"

    def test_url_without_query(self) -> None:
        assert Request.from_asgi(make_scope()).url == "/items"

    def test_frozen(self) -> None:
        request = Request.from_asgi(make_scope())
        with pytest.raises(AttributeError):
            request.path = "/other"  # type: ignore[misc]

    async def test_body_is_joined_and_cached(self) -> None:
        request = Request.from_asgi(make_scope(), body_receiver(b"hel", b"lo"))
        assert await request.body() == b"hello"
        assert await request.body() == b"hello"
        assert await request.text() == "hello"

    async def test_json(self) -> None:
        request = Request.from_asgi(make_scope(), body_receiver(b'{"a": [1, 2]}'))
        assert await request.json() == {"a": [1, 2]}

    async def test_no_receive_means_empty_body(self) -> None:
        assert await Request.from_asgi(make_scope()).body() == b""

    async def test_form_defaults_to_urlencoded(self) -> None:
        request = Request.from_asgi(make_scope(), body_receiver(b"username=ann&password=pw"))
        form = await request.form()
        assert form["username"] == "ann"
        assert form.get("password") == "pw"
