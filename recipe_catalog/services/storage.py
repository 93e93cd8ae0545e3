import logging
import re
import time
from pathlib import Path
from typing import Optional

from ..errors import StorageError
from ..settings import settings

logger = logging.getLogger("recipe_catalog.storage")

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")
_DOT_RUNS = re.compile(r"\.{2,}")


class ImageStorage:
    """Content directory holding uploaded dish images, keyed by filename."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def stored_name(original_filename: str) -> str:
        """
        Build a collision-resistant filename: '<epoch millis>-<original name>'.
        Directory parts are stripped and unsafe characters replaced.
        """
        base = Path(original_filename or "").name
        base = _UNSAFE_CHARS.sub("_", base)
        base = _DOT_RUNS.sub(".", base).strip("._") or "image"
        return f"{int(time.time() * 1000)}-{base}"

    def path_for(self, filename: str) -> Path:
        # Stored names are flat; refuse anything that could escape the root
        if not filename or filename in (".", "..") or "\\" in filename or Path(filename).name != filename:
            raise ValueError(f"Invalid image filename: {filename!r}")
        return self.root / filename

    def save(self, original_filename: str, data: bytes) -> str:
        """
        Write an upload to disk and return the stored filename.
        Raises StorageError if the file cannot be written.
        """
        filename = self.stored_name(original_filename)
        file_path = self.path_for(filename)
        try:
            with open(file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            raise StorageError(f"Failed to store image: {e}") from e

        logger.info(f"Saved {len(data)} bytes to {file_path}")
        return filename

    def delete(self, filename: Optional[str]) -> bool:
        """
        Best-effort removal of a stored image.
        Returns True if deleted or already absent, False on error.
        """
        if not filename:
            return True
        try:
            file_path = self.path_for(filename)
        except ValueError:
            logger.warning(f"Invalid delete key: {filename}")
            return False

        try:
            file_path.unlink()
            logger.info(f"Deleted image {file_path}")
        except FileNotFoundError:
            logger.info(f"Image {file_path} already absent")
        except OSError as e:
            logger.warning(f"Failed to delete image {file_path}: {e}")
            return False
        return True


def image_url(filename: Optional[str]) -> Optional[str]:
    """Public URL for a stored filename, or None when there is no image."""
    if not filename:
        return None
    return f"{settings.image_url_prefix.rstrip('/')}/{filename}"
