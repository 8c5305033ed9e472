"""Upload data models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class UploadedFile:
    """A raw file handed over by the upload surface.

    Either ``path`` or ``data`` is set. ``content_type`` is the type the upload
    surface declared, if any.
    """

    name: str
    content_type: Optional[str] = None
    path: Optional[Path] = None
    data: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "UploadedFile":
        return cls(name=path.name, content_type=content_type, path=path)


@dataclass(frozen=True)
class EncodedImage:
    """An upload converted to a transportable representation."""

    name: str
    mime_type: str
    encoded: str  # base64 payload
    preview: str  # data URI

    @property
    def size(self) -> int:
        """Approximate decoded size in bytes."""
        return len(self.encoded) * 3 // 4
