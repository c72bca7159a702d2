"""
Domain layer for Markdown rendering.
Provides the request/result types, the error taxonomy, the converter gateway
and a service that runs the read -> validate -> convert pipeline, so the HTTP
front-end only has to route and map errors.
"""

from .adapters import PandocConverter, build_pandoc_args
from .errors import (
    ConversionError,
    ConversionFailed,
    InvalidEncoding,
    InvalidRequest,
    MissingField,
    PayloadTooLarge,
    SpawnError,
    TransportError,
    UnsupportedFormat,
)
from .interfaces import (
    MEDIA_TYPES,
    SUPPORTED_FORMATS,
    ConversionRequest,
    ConversionResult,
    ConverterGateway,
    media_type_for,
)
from .service import ConversionService, parse_conversion_request, read_body
