"""Map request paths onto source files under the served directory."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .config import INDEX_FILENAME, MARKDOWN_SUFFIX
from .security import safe_join


class Disposition(str, Enum):
    RENDER = "render"
    PASSTHROUGH = "passthrough"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolvedRequest:
    request_path: str
    fs_path: Optional[Path]
    disposition: Disposition


def _contained(base_dir: Path, *parts: str) -> Optional[Path]:
    try:
        return safe_join(base_dir, *parts)
    except (OSError, ValueError):
        return None


def resolve_request_path(request_path: str, base_dir: Path) -> ResolvedRequest:
    """Resolve an HTTP request path against base_dir.

    - "/" (or an empty path) means ``index.md``
    - a directory means its ``index.md``
    - ``.md`` targets render; any other extension passes through to static serving
    - an extensionless path renders ``<path>.md`` if that file exists

    Every candidate is canonicalized; anything that lands outside base_dir
    is reported as not found.
    """
    remainder = (request_path or "").lstrip("/")
    if not remainder:
        remainder = INDEX_FILENAME
    try:
        return _resolve(request_path, Path(remainder), base_dir)
    except OSError:
        # e.g. ENAMETOOLONG from is_dir()/exists() on an over-long component
        return ResolvedRequest(request_path, None, Disposition.NOT_FOUND)


def _resolve(request_path: str, joined: Path, base_dir: Path) -> ResolvedRequest:
    # Extension rules apply to the requested name; the canonical path is the target.
    candidate = _contained(base_dir, str(joined))
    if candidate is None:
        return ResolvedRequest(request_path, None, Disposition.NOT_FOUND)

    if candidate.is_dir():
        joined = joined / INDEX_FILENAME
        candidate = _contained(base_dir, str(joined))
        if candidate is None:
            return ResolvedRequest(request_path, None, Disposition.NOT_FOUND)

    suffix = joined.suffix
    if suffix == MARKDOWN_SUFFIX:
        return ResolvedRequest(request_path, candidate, Disposition.RENDER)
    if suffix:
        return ResolvedRequest(request_path, candidate, Disposition.PASSTHROUGH)

    markdown_path = _contained(base_dir, f"{joined}{MARKDOWN_SUFFIX}")
    if markdown_path is not None and markdown_path.exists():
        return ResolvedRequest(request_path, markdown_path, Disposition.RENDER)
    return ResolvedRequest(request_path, candidate, Disposition.NOT_FOUND)
