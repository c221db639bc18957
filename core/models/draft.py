# =============================================================================
# core/models/draft.py - Draft Input
# =============================================================================
# Client-local state that exists between keystrokes and a successful add:
# the task text, the selected image, and a local preview of that image.
#
# The preview is a temporary file. It is released when a new image is
# selected, when the draft is cleared, and when the controller closes.
# =============================================================================

from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageFile:
    """An image picked by the user, held in memory until upload."""
    filename: str
    content: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lower-case extension including the dot, guessed from the type if the name has none."""
        suffix = Path(self.filename).suffix.lower()
        if suffix:
            return suffix
        return mimetypes.guess_extension(self.content_type) or ""

    @classmethod
    def from_path(cls, path: str | Path) -> ImageFile:
        """Read an image from disk, guessing its content type from the name."""
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)


class ImagePreview:
    """
    Local preview of a selected image.

    Backed by a temp file so front-ends can serve or open it.
    """

    def __init__(self, image: ImageFile):
        fd, name = tempfile.mkstemp(prefix="todo-preview-", suffix=image.extension)
        with os.fdopen(fd, "wb") as fh:
            fh.write(image.content)
        self.path = Path(name)
        self.content_type = image.content_type
        self.released = False
        logger.debug(f"Created image preview {self.path}")

    def release(self) -> None:
        """Delete the backing file. Safe to call more than once."""
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        logger.debug(f"Released image preview {self.path}")


@dataclass
class DraftInput:
    """Task text plus optional image being composed."""
    task: str = ""
    image: ImageFile | None = None
    preview: ImagePreview | None = None

    def select_image(self, image: ImageFile) -> None:
        """Replace the selected image, releasing the superseded preview."""
        self.release_preview()
        self.image = image
        self.preview = ImagePreview(image)

    def clear_image(self) -> None:
        self.release_preview()
        self.image = None

    def release_preview(self) -> None:
        if self.preview is not None:
            self.preview.release()
            self.preview = None

    def clear(self) -> None:
        """Discard everything after a successful add."""
        self.task = ""
        self.clear_image()
