from __future__ import annotations

from enum import Enum


class RejectionKind(str, Enum):
    # No resolvable source file, or the open/stat of it failed.
    NOT_FOUND = "not_found"
    # Target exists outside the markdown namespace; serve it verbatim.
    NOT_MARKDOWN = "not_markdown"
    # Source bytes could not be read or are not valid UTF-8.
    DECODING_ERROR = "decoding_error"


class Rejected(Exception):
    """Terminal outcome for a single request.

    Raised by the request pipeline and translated to a transport response
    by the server layer. Never carries filesystem paths in its message.
    """

    def __init__(self, kind: RejectionKind) -> None:
        super().__init__(kind.value)
        self.kind = kind

    def __repr__(self) -> str:
        return f"Rejected({self.kind.name})"
