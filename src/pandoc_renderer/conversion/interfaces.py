from dataclasses import dataclass
from typing import Protocol

SUPPORTED_FORMATS = ("docx", "pptx", "html")

MEDIA_TYPES: dict[str, str] = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",  # docx
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",  # pptx
    "html": "text/html",
}
DEFAULT_MEDIA_TYPE = "application/octet-stream"


def media_type_for(fmt: str) -> str:
    return MEDIA_TYPES.get(fmt, DEFAULT_MEDIA_TYPE)


@dataclass(frozen=True)
class ConversionRequest:
    text: str
    to: str
    standalone: bool = False
    embed_resources: bool = False


@dataclass(frozen=True)
class ConversionResult:
    content: bytes
    to: str

    @property
    def media_type(self) -> str:
        return media_type_for(self.to)

    @property
    def is_text(self) -> bool:
        # Only html output is safe to hand back as a JSON string
        return self.to == "html"


class ConverterGateway(Protocol):
    async def convert(self, request: ConversionRequest) -> bytes:
        """Convert the request's Markdown into the target format.

        Raises SpawnError when the engine cannot start and ConversionFailed
        when it exits unsuccessfully.
        """
