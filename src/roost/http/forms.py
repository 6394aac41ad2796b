"""Form body parsing — URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``; multipart bodies go
through ``python-multipart``'s streaming parser. Both produce the same
immutable ``FormData`` mapping.
"""

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    ``__getitem__`` returns the first value for a field; ``get_list``
    returns all of them (checkboxes, multi-selects). File parts are
    not kept.

    Usage::

        form = await request.form()
        username = form.get("username", "")
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]]) -> None:
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FormData({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a request body into ``FormData``.

    Raises:
        ValueError: If *content_type* is not a form encoding, or a
            multipart body has no boundary.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()

    if media_type == "application/x-www-form-urlencoded":
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))

    if media_type == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


class _PartCollector:
    """Accumulates multipart callbacks into text fields."""

    def __init__(self) -> None:
        self.data: dict[str, list[str]] = {}
        self._headers: dict[str, str] = {}
        self._header_name = ""
        self._buffer = bytearray()

    def callbacks(self) -> dict[str, Any]:
        return {
            "on_part_begin": self._begin,
            "on_part_data": self._chunk,
            "on_part_end": self._end,
            "on_header_field": self._header_field,
            "on_header_value": self._header_value,
        }

    def _begin(self) -> None:
        self._headers = {}
        self._buffer = bytearray()

    def _chunk(self, data: bytes, start: int, end: int) -> None:
        self._buffer.extend(data[start:end])

    def _header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name = data[start:end].decode("latin-1").lower()

    def _header_value(self, data: bytes, start: int, end: int) -> None:
        self._headers[self._header_name] = data[start:end].decode("latin-1")

    def _end(self) -> None:
        disposition = self._headers.get("content-disposition")
        if disposition is None:
            return
        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None or b"filename" in params:
            return
        value = self._buffer.decode("utf-8", errors="replace")
        self.data.setdefault(name.decode("utf-8"), []).append(value)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.data)
