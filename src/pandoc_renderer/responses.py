import base64

from fastapi.responses import JSONResponse, Response

from .conversion.interfaces import ConversionResult


def wants_json(accept: str | None) -> bool:
    return "application/json" in (accept or "")


def envelope(result: ConversionResult) -> dict[str, object]:
    """JSON wrapper for a rendered document.

    html is returned as text; binary formats are base64 encoded.
    """
    if result.is_text:
        output = result.content.decode("utf-8", errors="replace")
    else:
        output = base64.b64encode(result.content).decode("ascii")
    return {
        "output": output,
        "base64": not result.is_text,
        "contentType": result.media_type,
    }


def compose_response(result: ConversionResult, accept: str | None) -> Response:
    if wants_json(accept):
        return JSONResponse(content=envelope(result))
    # Set verbatim so text/html is not given a charset suffix
    return Response(content=result.content, headers={"content-type": result.media_type})
