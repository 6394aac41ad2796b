"""Tests for request-scoped context accessors."""

import pytest

from roost.context import (
    RequestContext,
    context_var,
    get_context,
    get_request,
    get_session,
    request_var,
)


class TestAccessors:
    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()
        with pytest.raises(LookupError):
            get_context()
        with pytest.raises(LookupError):
            get_session()

    def test_bound(self, make_context) -> None:
        context: RequestContext = make_context("/here", session="a session")
        request_token = request_var.set(context.request)
        context_token = context_var.set(context)
        try:
            assert get_request().path == "/here"
            assert get_context() is context
            assert get_session() == "a session"
        finally:
            context_var.reset(context_token)
            request_var.reset(request_token)

    def test_no_session(self, make_context) -> None:
        token = context_var.set(make_context())
        try:
            with pytest.raises(LookupError, match="no database"):
                get_session()
        finally:
            context_var.reset(token)

    def test_frozen(self, make_context) -> None:
        with pytest.raises(AttributeError):
            make_context().captures = ("1",)
