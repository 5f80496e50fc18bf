from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import DEFAULT_TEMPLATE_DIR

HEAD_FILENAME = "head.html"
TAIL_FILENAME = "tail.html"


@dataclass(frozen=True)
class PageTemplate:
    head: str
    tail: str

    def wrap(self, body: str) -> str:
        return self.head + body + self.tail


def load_template(template_dir: Optional[Path] = None) -> PageTemplate:
    """Read the head/tail fragments once; their content is opaque here."""
    root = template_dir or DEFAULT_TEMPLATE_DIR
    return PageTemplate(
        head=(root / HEAD_FILENAME).read_text(encoding="utf-8"),
        tail=(root / TAIL_FILENAME).read_text(encoding="utf-8"),
    )
