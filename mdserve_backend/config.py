from __future__ import annotations

import ipaddress
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator


# Directory to serve and address to listen on.
# Both may come from the command line; these env vars are the fallback.
BASE_DIR_ENV = os.environ.get("MDSERVE_BASE_DIR") or None
ADDRESS_ENV = os.environ.get("MDSERVE_ADDRESS") or None

# Directory holding head.html / tail.html overrides.
# Default: the fragments bundled in mdserve_backend/html/.
_template_raw = os.environ.get("MDSERVE_TEMPLATE_DIR")
TEMPLATE_DIR_ENV = Path(_template_raw) if _template_raw and _template_raw.strip() else None
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "html"

LOG_LEVEL = os.environ.get("MDSERVE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("MDSERVE_LOG_FORMAT", "json").lower()

# Served for "/" and for any request that names a directory.
INDEX_FILENAME = "index.md"
MARKDOWN_SUFFIX = ".md"

HTML_CONTENT_TYPE = "text/html; charset=UTF-8"
SOURCE_ENCODING = "utf-8"


def parse_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address.

    IPv6 hosts must be bracketed (``[::1]:8080``).
    """
    if not isinstance(address, str):
        raise ValueError("not a valid address")
    address = address.strip()
    host, sep, port_raw = address.rpartition(":")
    if not sep or not host or not port_raw.isdigit():
        raise ValueError("not a valid address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            raise ValueError("not a valid address")
    elif ":" in host:
        # Unbracketed IPv6 is ambiguous with the port separator.
        raise ValueError("not a valid address")
    port = int(port_raw)
    if port > 65535:
        raise ValueError("not a valid address")
    return host, port


class ServerConfig(BaseModel):
    """Process configuration, validated once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_dir: Path
    host: str
    port: int
    template_dir: Optional[Path] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("base_dir")
    @classmethod
    def validate_base_dir(cls, v: Path) -> Path:
        resolved = Path(v).expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"base directory does not exist: {v}")
        return resolved

    @field_validator("template_dir")
    @classmethod
    def validate_template_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        resolved = Path(v).expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"template directory does not exist: {v}")
        return resolved

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 <= v <= 65535:
            raise ValueError("port must be between 0 and 65535")
        return v

    @classmethod
    def from_address(cls, base_dir: str | Path, address: str, **kwargs) -> "ServerConfig":
        host, port = parse_address(address)
        return cls(base_dir=Path(base_dir), host=host, port=port, **kwargs)

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"
