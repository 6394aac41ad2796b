"""Tests for content negotiation — return value to Response."""

import json

import pytest
from kida import DictLoader, Environment

from roost.errors import ConfigurationError
from roost.http.response import Redirect, Response
from roost.server.negotiation import negotiate
from roost.templating.returns import InlineTemplate, Template


@pytest.fixture
def env() -> Environment:
    return Environment(loader=DictLoader({"hello.html": "<p>Hello {{ name }}</p>"}))


class TestNegotiate:
    def test_response_passes_through(self) -> None:
        response = Response("x", status=201)
        assert negotiate(response) is response

    def test_redirect(self) -> None:
        response = negotiate(Redirect("/login", status=303))
        assert response.status == 303
        assert response.header("Location") == "/login"
        assert response.text == ""

    def test_template(self, env: Environment) -> None:
        response = negotiate(Template("hello.html", name="ann"), kida_env=env)
        assert response.text == "<p>Hello ann</p>"
        assert response.content_type == "text/html; charset=utf-8"

    def test_template_escapes(self) -> None:
        env = Environment(loader=DictLoader({"raw.html": "{{ name }}"}), autoescape=True)
        response = negotiate(Template("raw.html", name="<b>"), kida_env=env)
        assert response.text == "&lt;b&gt;"

    def test_template_without_env(self) -> None:
        with pytest.raises(ConfigurationError):
            negotiate(Template("hello.html"))

    def test_inline_template(self) -> None:
        response = negotiate(Template.inline("<h1>{{ title }}</h1>", title="Hi"))
        assert response.text == "<h1>Hi</h1>"

    def test_inline_type(self) -> None:
        assert isinstance(Template.inline("x"), InlineTemplate)

    def test_str(self) -> None:
        response = negotiate("hello")
        assert response.status == 200
        assert response.text == "hello"

    def test_bytes(self) -> None:
        response = negotiate(b"\x00\x01")
        assert response.content_type == "application/octet-stream"

    def test_dict(self) -> None:
        response = negotiate({"ok": True})
        assert response.content_type == "application/json"
        assert json.loads(response.text) == {"ok": True}

    def test_list(self) -> None:
        assert json.loads(negotiate([1, 2]).text) == [1, 2]

    def test_none_is_empty_ok(self) -> None:
        response = negotiate(None)
        assert response.status == 200
        assert response.text == ""

    def test_tuple_status(self) -> None:
        response = negotiate(("created", 201))
        assert response.status == 201
        assert response.text == "created"

    def test_tuple_status_headers(self) -> None:
        response = negotiate(("x", 202, {"X-Job": 7}))
        assert response.status == 202
        assert response.header("x-job") == "7"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert object"):
            negotiate(object())
