from __future__ import annotations

import os
import stat
from pathlib import Path

import structlog
from starlette.concurrency import run_in_threadpool

from .cache import RenderCache
from .config import SOURCE_ENCODING
from .errors import Rejected, RejectionKind
from .renderer import Renderer
from .resolver import Disposition, resolve_request_path
from .template import PageTemplate

log = structlog.get_logger()


def stat_source(path: Path) -> int:
    """Open path and return its st_mtime_ns. Raises OSError on any failure."""
    with path.open("rb") as fh:
        st = os.fstat(fh.fileno())
    if not stat.S_ISREG(st.st_mode):
        raise IsADirectoryError(str(path))
    return st.st_mtime_ns


def read_source(path: Path) -> str:
    return path.read_bytes().decode(SOURCE_ENCODING)


class MarkdownHandler:
    """Turns a request path into a complete HTML page.

    resolve -> stat -> cache lookup (render on miss) -> wrap. Every failure
    is raised as ``Rejected``; nothing here knows about HTTP status codes.
    """

    def __init__(
        self,
        base_dir: Path,
        cache: RenderCache,
        renderer: Renderer,
        template: PageTemplate,
    ) -> None:
        self.base_dir = base_dir
        self.cache = cache
        self.renderer = renderer
        self.template = template

    async def handle(self, request_path: str) -> str:
        resolved = await run_in_threadpool(resolve_request_path, request_path, self.base_dir)
        if resolved.disposition is Disposition.PASSTHROUGH:
            raise Rejected(RejectionKind.NOT_MARKDOWN)
        if resolved.disposition is Disposition.NOT_FOUND or resolved.fs_path is None:
            raise Rejected(RejectionKind.NOT_FOUND)

        path = resolved.fs_path
        try:
            modified_ns = await run_in_threadpool(stat_source, path)
        except OSError:
            raise Rejected(RejectionKind.NOT_FOUND)

        async def produce() -> str:
            try:
                text = await run_in_threadpool(read_source, path)
            except (OSError, UnicodeDecodeError):
                log.warning("source_decode_failed", request_path=request_path)
                raise Rejected(RejectionKind.DECODING_ERROR)
            return await run_in_threadpool(self.renderer.render, text)

        body = await self.cache.get_or_render(path, modified_ns, produce)
        return self.template.wrap(body)
