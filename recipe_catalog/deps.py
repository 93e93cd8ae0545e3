"""FastAPI dependencies for the recipe catalog API.

Provides:
- Database session dependency
- Image storage handle
- Shared rate limiter
"""

from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from .db import get_db
from .services.storage import ImageStorage
from .settings import settings

__all__ = ["get_db", "get_image_storage", "limiter"]

limiter = Limiter(key_func=get_remote_address)

_image_storage: Optional[ImageStorage] = None


def get_image_storage() -> ImageStorage:
    global _image_storage
    if _image_storage is None:
        _image_storage = ImageStorage(settings.image_dir)
    return _image_storage
