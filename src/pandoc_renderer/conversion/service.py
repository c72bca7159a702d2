import json
import logging
from collections.abc import AsyncIterable

from ..config import MAX_BODY_BYTES
from .errors import InvalidEncoding, MissingField, PayloadTooLarge, UnsupportedFormat
from .interfaces import SUPPORTED_FORMATS, ConversionRequest, ConversionResult, ConverterGateway

logger = logging.getLogger(__name__)


async def read_body(chunks: AsyncIterable[bytes], max_bytes: int = MAX_BODY_BYTES) -> bytes:
    """Assemble a request body, failing as soon as it grows past max_bytes.

    The size check runs per chunk, so an oversized upload is never buffered
    beyond the limit.
    """
    buf = bytearray()
    async for chunk in chunks:
        if len(buf) + len(chunk) > max_bytes:
            raise PayloadTooLarge()
        buf.extend(chunk)
    return bytes(buf)


def _non_blank(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_conversion_request(payload: bytes) -> ConversionRequest:
    """Parse and validate a JSON render request.

    Expected shape: {"text": str, "to": "docx"|"pptx"|"html",
    "standalone"?: bool, "embed-resources"?: bool}.
    """
    try:
        body = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidEncoding() from e
    if not isinstance(body, dict):
        body = {}

    text = body.get("text")
    fmt = body.get("to")
    if not _non_blank(text):
        raise MissingField("text")
    if not _non_blank(fmt):
        raise MissingField("to")
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormat(fmt)

    return ConversionRequest(
        text=text,
        to=fmt,
        standalone=bool(body.get("standalone")),
        embed_resources=bool(body.get("embed-resources")),
    )


class ConversionService:
    """Render pipeline: bounded body read, validation, then conversion.

    Framework-agnostic; the HTTP layer hands in the body stream and turns
    raised ConversionError subclasses into responses. Holds no per-request
    state, so one instance serves all concurrent requests.
    """

    def __init__(self, converter: ConverterGateway, *, max_body_bytes: int = MAX_BODY_BYTES) -> None:
        self._converter = converter
        self._max_body_bytes = max_body_bytes

    @property
    def max_body_bytes(self) -> int:
        return self._max_body_bytes

    async def read_request(self, chunks: AsyncIterable[bytes]) -> ConversionRequest:
        payload = await read_body(chunks, self._max_body_bytes)
        return parse_conversion_request(payload)

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        logger.info("converting %d chars of markdown to %s", len(request.text), request.to)
        content = await self._converter.convert(request)
        logger.info("produced %d bytes of %s", len(content), request.to)
        return ConversionResult(content=content, to=request.to)

    async def render(self, chunks: AsyncIterable[bytes]) -> ConversionResult:
        request = await self.read_request(chunks)
        return await self.convert(request)
