"""Body reader limits and the read -> validate -> convert pipeline."""

from __future__ import annotations

import asyncio

import pytest

from pandoc_renderer.conversion import (
    ConversionService,
    MissingField,
    PayloadTooLarge,
    read_body,
)

from .conftest import RecordingConverter


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


class _Exploding:
    """Yields the given chunks and fails if read any further."""

    def __init__(self, *parts: bytes) -> None:
        self.parts = list(parts)
        self.consumed = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self.consumed >= len(self.parts):
            raise AssertionError("reader kept consuming past the limit")
        self.consumed += 1
        return self.parts[self.consumed - 1]


def test_read_body_joins_chunks():
    assert asyncio.run(read_body(_chunks(b"ab", b"", b"cd"), max_bytes=10)) == b"abcd"


def test_read_body_accepts_exactly_the_limit():
    assert asyncio.run(read_body(_chunks(b"12345", b"67890"), max_bytes=10)) == b"1234567890"


def test_read_body_stops_at_first_chunk_over_the_limit():
    stream = _Exploding(b"123456", b"78901")
    with pytest.raises(PayloadTooLarge) as exc_info:
        asyncio.run(read_body(stream, max_bytes=10))
    assert stream.consumed == 2
    assert exc_info.value.status_code == 413
    assert exc_info.value.message == "Request body too large"


def test_render_passes_validated_request_to_converter():
    converter = RecordingConverter(output=b"DOCX")
    service = ConversionService(converter, max_body_bytes=1024)

    result = asyncio.run(service.render(_chunks(b'{"text": "# Hi", ', b'"to": "docx"}')))

    assert result.content == b"DOCX"
    assert result.to == "docx"
    assert result.is_text is False
    assert [c.to for c in converter.calls] == ["docx"]


def test_oversized_body_never_reaches_converter():
    converter = RecordingConverter()
    service = ConversionService(converter, max_body_bytes=10)

    with pytest.raises(PayloadTooLarge):
        asyncio.run(service.render(_chunks(b'{"text": "# Hi", "to": "pdf"}')))
    assert converter.calls == []


def test_invalid_request_never_reaches_converter():
    converter = RecordingConverter()
    service = ConversionService(converter)

    with pytest.raises(MissingField):
        asyncio.run(service.render(_chunks(b'{"to": "html"}')))
    assert converter.calls == []
