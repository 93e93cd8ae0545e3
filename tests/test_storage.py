import pytest

from recipe_catalog.errors import StorageError
from recipe_catalog.services.storage import ImageStorage, image_url


def test_save_prefixes_timestamp_and_keeps_name(storage):
    filename = storage.save("toast.jpg", b"data")

    prefix, _, rest = filename.partition("-")
    assert prefix.isdigit()
    assert rest == "toast.jpg"
    assert (storage.root / filename).read_bytes() == b"data"


def test_stored_name_strips_directories_and_unsafe_chars():
    name = ImageStorage.stored_name("../../etc/my photo (1).png")
    assert "/" not in name
    assert name.endswith("-my_photo_1_.png")

    assert ImageStorage.stored_name("").endswith("-image")


def test_path_for_rejects_traversal(storage):
    for bad in ("", ".", "..", "../x.jpg", "a/b.jpg", "a\\b.jpg"):
        with pytest.raises(ValueError):
            storage.path_for(bad)


def test_delete_is_best_effort(storage):
    filename = storage.save("pie.jpg", b"pie")

    assert storage.delete(filename) is True
    assert not storage.path_for(filename).exists()
    # Already gone
    assert storage.delete(filename) is True
    assert storage.delete(None) is True
    assert storage.delete("../escape.jpg") is False


def test_save_failure_raises_storage_error(tmp_path):
    storage = ImageStorage(tmp_path / "imgs")
    storage.root.rmdir()

    with pytest.raises(StorageError):
        storage.save("lost.jpg", b"x")


def test_image_url():
    assert image_url(None) is None
    assert image_url("") is None
    assert image_url("123-a.jpg") == "/imgs/123-a.jpg"


def test_stored_name_collapses_dot_runs(storage):
    name = ImageStorage.stored_name("my..photo...jpg")
    assert name.endswith("-my.photo.jpg")

    filename = storage.save("my..photo.jpg", b"jpg")
    assert storage.path_for(filename).read_bytes() == b"jpg"


def test_path_for_accepts_dotted_names(storage):
    assert storage.path_for("123-a.b.c.jpg") == storage.root / "123-a.b.c.jpg"


def test_image_mount_points_at_configured_directory():
    from recipe_catalog.main import app
    from recipe_catalog.settings import settings

    mount = next(r for r in app.routes if getattr(r, "name", None) == "images")
    assert mount.path == settings.image_url_prefix
    assert mount.app.directory == settings.image_dir
