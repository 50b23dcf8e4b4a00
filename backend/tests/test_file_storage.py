import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.core.exceptions import InternalError, ValidationError
from app.utils.file_storage import FileStorage


def upload(filename, data=b"image-bytes", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def storage(tmp_path):
    return FileStorage(
        tmp_path / "files",
        allowed_extensions=[".png", ".JPG"],
        allowed_content_types=["image/png", "image/jpeg"],
        max_bytes=16,
    )


def test_save_generates_field_prefixed_name(storage):
    filename = storage.save(upload("Photo.PNG"), "passport_photo")

    assert filename.startswith("passport_photo-")
    assert filename.endswith(".png")
    assert storage.path_for(filename).read_bytes() == b"image-bytes"


def test_rejects_extension_and_content_type(storage):
    with pytest.raises(ValidationError):
        storage.save(upload("photo.gif", content_type="image/gif"), "passport_photo")
    with pytest.raises(ValidationError, match="JPG/PNG"):
        storage.save(upload("photo.jpg", content_type="application/pdf"), "passport_photo")

    assert list(storage.root.iterdir()) == []


def test_oversize_file_is_removed(storage):
    with pytest.raises(ValidationError, match="too large"):
        storage.save(upload("big.png", data=b"x" * 17), "signature")

    assert list(storage.root.iterdir()) == []


def test_path_for_strips_directories(storage):
    assert storage.path_for("../../etc/passwd") == storage.root / "passwd"


def test_delete_missing_file_does_not_raise(storage):
    filename = storage.save(upload("a.png"), "signature")

    storage.delete_many([filename, filename, None])

    assert not storage.path_for(filename).exists()


def test_oversize_upload_stops_reading_past_the_limit(storage):
    storage.chunk_size = 8
    big = upload("big.png", data=b"x" * 4096)

    with pytest.raises(ValidationError):
        storage.save(big, "signature")

    assert big.file.tell() <= storage.max_bytes + storage.chunk_size
    assert list(storage.root.iterdir()) == []


def test_unwritable_root_raises_internal_error(storage):
    storage.root.rmdir()

    with pytest.raises(InternalError):
        storage.save(upload("a.png"), "signature")
