"""Markdown to sanitized HTML.

Parsing lets raw HTML through so authors can embed markup; the sanitizer
then reduces the result to a fixed allowlist. Script and style elements
are dropped together with their content; other disallowed tags are removed
while their children are kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

import markdown
import nh3


# Attributes allowed on every element (the sanitizer's defaults plus id/class,
# which the header anchors and author markup rely on).
GENERIC_ATTRIBUTES = frozenset({"id", "class", "lang", "title"})

_DEFAULT_EXTENSIONS = (
    "tables",
    "fenced_code",
    "smarty",
    "toc",
    "pymdownx.caret",
    "pymdownx.magiclink",
)

_DEFAULT_EXTENSION_CONFIGS = {
    # Only the header ids are wanted, not a rendered [TOC] block.
    "toc": {"marker": ""},
    "pymdownx.caret": {"superscript": True, "insert": False},
    "smarty": {"smart_dashes": True, "smart_quotes": True, "smart_ellipses": True},
}


def _freeze(configs: Mapping[str, Mapping[str, object]]) -> Mapping[str, Mapping[str, object]]:
    return MappingProxyType({name: MappingProxyType(dict(opts)) for name, opts in configs.items()})


def _default_attributes() -> Mapping[str, frozenset[str]]:
    attributes = {tag: frozenset(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
    attributes["*"] = frozenset(attributes.get("*", frozenset()) | GENERIC_ATTRIBUTES)
    return MappingProxyType(attributes)


@dataclass(frozen=True)
class RenderOptions:
    """Parser and sanitizer settings. Built once at startup, never mutated."""

    extensions: tuple[str, ...] = _DEFAULT_EXTENSIONS
    extension_configs: Mapping[str, Mapping[str, object]] = field(
        default_factory=lambda: _freeze(_DEFAULT_EXTENSION_CONFIGS)
    )
    tags: frozenset[str] = field(default_factory=lambda: frozenset(nh3.ALLOWED_TAGS))
    clean_content_tags: frozenset[str] = frozenset({"script", "style"})
    attributes: Mapping[str, frozenset[str]] = field(default_factory=_default_attributes)

    @classmethod
    def default(cls) -> "RenderOptions":
        return cls()


class Renderer:
    """Stateless Markdown renderer.

    A fresh parser is built for every call, so the same text always yields
    byte-identical output and concurrent calls share nothing.
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions.default()

    def to_html(self, text: str) -> str:
        md = markdown.Markdown(
            extensions=list(self.options.extensions),
            extension_configs={name: dict(opts) for name, opts in self.options.extension_configs.items()},
            output_format="html",
        )
        return md.convert(text)

    def sanitize(self, html: str) -> str:
        return nh3.clean(
            html,
            tags=set(self.options.tags),
            clean_content_tags=set(self.options.clean_content_tags),
            attributes={tag: set(attrs) for tag, attrs in self.options.attributes.items()},
        )

    def render(self, text: str) -> str:
        return self.sanitize(self.to_html(text))
