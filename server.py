from __future__ import annotations

import argparse
import sys
import time
from typing import Optional, Sequence

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from mdserve_backend.cache import RenderCache
from mdserve_backend.config import (
    ADDRESS_ENV,
    BASE_DIR_ENV,
    HTML_CONTENT_TYPE,
    LOG_FORMAT,
    LOG_LEVEL,
    TEMPLATE_DIR_ENV,
    ServerConfig,
)
from mdserve_backend.errors import Rejected, RejectionKind
from mdserve_backend.handler import MarkdownHandler
from mdserve_backend.log_setup import configure_logging
from mdserve_backend.renderer import Renderer, RenderOptions
from mdserve_backend.template import PageTemplate, load_template


__version__ = "0.1"

log = structlog.get_logger()

# Rejection kinds that end in an error response. NOT_MARKDOWN is not listed:
# it hands the request to static file serving instead.
REJECTION_STATUS: dict[RejectionKind, tuple[int, str]] = {
    RejectionKind.NOT_FOUND: (404, "Not found"),
    RejectionKind.DECODING_ERROR: (500, "Could not decode document"),
}


def create_app(
    config: ServerConfig,
    *,
    cache: Optional[RenderCache] = None,
    renderer: Optional[Renderer] = None,
    template: Optional[PageTemplate] = None,
) -> FastAPI:
    """Build the application around one shared cache and renderer.

    Callers may inject their own cache/renderer/template (tests do).
    """
    cache = cache if cache is not None else RenderCache()
    renderer = renderer if renderer is not None else Renderer(RenderOptions.default())
    template = template if template is not None else load_template(config.template_dir)

    handler = MarkdownHandler(config.base_dir, cache, renderer, template)
    static = StaticFiles(directory=str(config.base_dir))

    app = FastAPI(title="mdserve", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.cache = cache
    app.state.renderer = renderer
    app.state.handler = handler

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log.info(
            "http_request",
            remote_addr=request.client.host if request.client else "-",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        return response

    @app.get("/{request_path:path}")
    async def serve_path(request_path: str, request: Request) -> Response:
        try:
            body = await handler.handle(request.url.path)
        except Rejected as e:
            if e.kind is RejectionKind.NOT_MARKDOWN:
                # StaticFiles does its own containment check and content-type guess.
                return await static.get_response(request_path, request.scope)
            status_code, detail = REJECTION_STATUS[e.kind]
            log.info("request_rejected", path=request.url.path, kind=e.kind.value)
            raise HTTPException(status_code=status_code, detail=detail)
        return Response(content=body, status_code=200, media_type=HTML_CONTENT_TYPE)

    return app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdserve", description="Serve you some markdown")
    parser.add_argument("-d", "--dir", dest="base_dir", default=BASE_DIR_ENV, help="Directory to serve")
    parser.add_argument("-a", "--address", default=ADDRESS_ENV, help="Address to listen to (host:port)")
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    parser.add_argument("--log-format", default=LOG_FORMAT, choices=["json", "text"])
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """Parse the command line into a ServerConfig.

    Missing or invalid values exit through argparse with the usage message.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.base_dir or not args.address:
        parser.error("both --dir and --address are required")
    try:
        return ServerConfig.from_address(
            args.base_dir,
            args.address,
            template_dir=TEMPLATE_DIR_ENV,
            log_level=args.log_level,
            log_format=args.log_format,
        )
    except (ValidationError, ValueError) as e:
        parser.error(_first_error(e))


def _first_error(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if errors:
            return str(errors[0].get("msg", exc))
    return str(exc)


def main(argv: Optional[Sequence[str]] = None) -> None:
    import uvicorn

    config = parse_config(argv)
    configure_logging(config.log_level, config.log_format)
    app = create_app(config)
    log.info("server_starting", url=config.url, base_dir=str(config.base_dir))
    uvicorn.run(app, host=config.host, port=config.port, access_log=False, log_level=config.log_level.lower())


if __name__ == "__main__":
    main(sys.argv[1:])
