from __future__ import annotations

from pathlib import Path


def safe_join(base_dir: Path, *parts: str) -> Path:
    """Join paths and ensure the result stays within base_dir.

    The result is canonical (symlinks resolved), so it also serves as the
    identity of a source file for caching. Raises ValueError when the
    joined path escapes base_dir.
    """
    base_dir = base_dir.resolve()
    candidate = base_dir
    for part in parts:
        candidate = candidate / part
    resolved = candidate.resolve()
    if resolved == base_dir:
        return resolved
    if base_dir not in resolved.parents:
        raise ValueError("Path traversal attempt")
    return resolved
