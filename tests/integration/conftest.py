"""Integration fixtures: the full ASGI app driven through httpx."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from mdserve_backend.cache import RenderCache
from mdserve_backend.config import ServerConfig
from mdserve_backend.renderer import Renderer
from mdserve_backend.template import PageTemplate
from server import create_app


@pytest.fixture()
def app(
    server_config: ServerConfig,
    render_cache: RenderCache,
    renderer: Renderer,
    template: PageTemplate,
) -> FastAPI:
    return create_app(server_config, cache=render_cache, renderer=renderer, template=template)


@pytest.fixture()
async def client(app: FastAPI):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
