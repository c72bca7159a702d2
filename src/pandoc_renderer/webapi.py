import logging
import os

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from . import __version__
from .config import Settings
from .conversion import ConversionError, ConversionService, ConverterGateway, PandocConverter, TransportError
from .responses import compose_response

logger = logging.getLogger(__name__)


async def _body_chunks(request: Request):
    # Surface transport failures as a pipeline error rather than a framework one
    try:
        async for chunk in request.stream():
            yield chunk
    except ClientDisconnect as e:
        raise TransportError("client disconnected before the request body was complete") from e
    except OSError as e:
        raise TransportError(str(e)) from e


def create_app(settings: Settings | None = None, converter: ConverterGateway | None = None) -> FastAPI:
    """Build the renderer application.

    A converter may be injected; otherwise a PandocConverter is built from
    settings.
    """
    settings = settings or Settings.from_env()
    if converter is None:
        converter = PandocConverter(settings.pandoc_command, timeout_sec=settings.timeout_sec)
    service = ConversionService(converter, max_body_bytes=settings.max_body_bytes)

    app = FastAPI(
        title="Pandoc Renderer",
        version=os.getenv("PANDOC_RENDERER_VERSION", __version__),
        description="Converts Markdown into docx, pptx or html using pandoc.",
    )
    app.state.settings = settings
    app.state.service = service

    @app.exception_handler(ConversionError)
    async def _conversion_error(request: Request, exc: ConversionError) -> JSONResponse:
        if exc.status_code < 500:
            logger.warning("rejected %s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.error("render failed: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Unknown paths and methods all answer the same way
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not found", status_code=404)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/version")
    def version() -> dict[str, str]:
        return {"pandoc": "renderer"}

    @app.post("/")
    async def render(request: Request, accept: str | None = Header(None)) -> Response:
        """Render Markdown into the requested format.

        Accepts a JSON body {"text", "to", "standalone"?, "embed-resources"?}.
        Returns the document bytes, or a JSON envelope when the Accept header
        asks for application/json.
        """
        result = await service.render(_body_chunks(request))
        return compose_response(result, accept)

    return app


app = create_app()


def run() -> None:
    """Run the renderer with uvicorn.

    Exposes the app at host:port (default 0.0.0.0:3030). Set PORT env var to override.
    """
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("pandoc renderer listening on %s:%d", settings.host, settings.port)
    uvicorn.run("pandoc_renderer.webapi:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    run()
