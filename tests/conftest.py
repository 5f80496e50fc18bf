"""Shared fixtures: a small served directory, an injectable renderer probe."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdserve_backend.cache import RenderCache
from mdserve_backend.config import ServerConfig
from mdserve_backend.handler import MarkdownHandler
from mdserve_backend.renderer import Renderer
from mdserve_backend.template import PageTemplate

HEAD = "<html><body>\n"
TAIL = "\n</body></html>\n"


class CountingRenderer(Renderer):
    """Renderer that records how many documents it rendered."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def render(self, text: str) -> str:
        self.calls += 1
        return super().render(text)


@pytest.fixture()
def docs_dir(tmp_path: Path) -> Path:
    """A served root plus a file beside it that must stay unreachable."""
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.md").write_text("# Home\n\nWelcome home.\n", encoding="utf-8")
    (site / "notes.md").write_text("# Notes\n\nSome notes.\n", encoding="utf-8")
    (site / "guide").mkdir()
    (site / "guide" / "index.md").write_text("# Guide\n", encoding="utf-8")
    (site / "empty").mkdir()
    (site / "style.css").write_text("body { color: red; }\n", encoding="utf-8")
    (site / "plain").write_text("no extension\n", encoding="utf-8")
    (site / "bad.md").write_bytes(b"# Bad \xff\xfe\xfd\n")
    (tmp_path / "secret.md").write_text("# Secret\n", encoding="utf-8")
    return site


@pytest.fixture()
def template() -> PageTemplate:
    return PageTemplate(head=HEAD, tail=TAIL)


@pytest.fixture()
def renderer() -> CountingRenderer:
    return CountingRenderer()


@pytest.fixture()
def render_cache() -> RenderCache:
    return RenderCache()


@pytest.fixture()
def handler(
    docs_dir: Path,
    render_cache: RenderCache,
    renderer: CountingRenderer,
    template: PageTemplate,
) -> MarkdownHandler:
    return MarkdownHandler(docs_dir.resolve(), render_cache, renderer, template)


@pytest.fixture()
def server_config(docs_dir: Path) -> ServerConfig:
    return ServerConfig(base_dir=docs_dir, host="127.0.0.1", port=3030)
