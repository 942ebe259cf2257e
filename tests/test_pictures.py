"""Profile picture upload tests."""

import logging
from io import BytesIO
from unittest.mock import MagicMock

from PIL import Image
from sqlalchemy.exc import OperationalError

from src.config import get_settings
from src.models import User
from src.services.storage import PictureStorageError

URL = "/api/users/current/pictures"


def make_image(image_format: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(255, 0, 0)).save(buffer, format=image_format)
    return buffer.getvalue()


PNG_BYTES = make_image()


def upload(client, headers, name="me.png", data=PNG_BYTES, content_type="image/png"):
    return client.post(URL, headers=headers, files={"file": (name, data, content_type)})


def stored_files(storage) -> list[str]:
    if not storage.root.exists():
        return []
    return sorted(path.name for path in storage.root.iterdir())


def current_user(db, user_id: int) -> User:
    db.expire_all()
    return db.query(User).filter(User.id == user_id).one()


def test_upload_picture(client, auth_headers, storage, db):
    """Test uploading a picture stores it and points the profile at it."""
    response = upload(client, auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": "image imported."}

    user = current_user(db, auth_headers.user_id)
    assert user.picture_key.endswith("_me.png")
    assert user.picture == f"http://testserver/media/{user.picture_key}"
    assert stored_files(storage) == [user.picture_key]
    assert storage.path_for(user.picture_key).read_bytes() == PNG_BYTES

    profile = client.get("/api/users/current/profile", headers=auth_headers).json()
    assert profile["picture"] == user.picture


def test_upload_keeps_default_picture_file(client, auth_headers, storage, monkeypatch):
    """Test replacing the default picture never tries to delete it."""
    delete = MagicMock()
    monkeypatch.setattr(storage, "delete", delete)

    assert upload(client, auth_headers).status_code == 200
    delete.assert_not_called()


def test_upload_replaces_previous_picture(client, auth_headers, storage, db):
    """Test the previous hosted picture is removed once the new one is recorded."""
    assert upload(client, auth_headers, name="first.png").status_code == 200
    first_key = current_user(db, auth_headers.user_id).picture_key

    assert upload(client, auth_headers, name="second.png").status_code == 200
    second_key = current_user(db, auth_headers.user_id).picture_key

    assert first_key != second_key
    assert stored_files(storage) == [second_key]


def test_upload_same_name_twice_gets_distinct_keys(client, auth_headers, db):
    """Test identical filenames do not collide."""
    assert upload(client, auth_headers).status_code == 200
    first_key = current_user(db, auth_headers.user_id).picture_key
    assert upload(client, auth_headers).status_code == 200
    assert current_user(db, auth_headers.user_id).picture_key != first_key


def test_upload_sanitizes_filename(client, auth_headers, storage, db):
    """Test a hostile filename cannot escape the media directory."""
    assert upload(client, auth_headers, name="../../etc/pass wd.png").status_code == 200

    key = current_user(db, auth_headers.user_id).picture_key
    assert "/" not in key
    assert key.endswith("_pass_wd.png")
    assert storage.path_for(key).parent == storage.root


def test_upload_without_file(client, auth_headers):
    """Test a request with no file."""
    response = client.post(URL, headers=auth_headers, files={"other": ("x.png", PNG_BYTES)})
    assert response.status_code == 415
    assert response.json() == {"erreur": "problem saving image."}


def test_upload_unsupported_type(client, auth_headers, storage, db):
    """Test a file that is not an image."""
    response = upload(client, auth_headers, name="notes.txt", data=b"hi", content_type="text/plain")
    assert response.status_code == 415
    assert stored_files(storage) == []
    assert current_user(db, auth_headers.user_id).picture == get_settings().default_picture_url


def test_upload_empty_file(client, auth_headers):
    """Test an empty upload."""
    response = upload(client, auth_headers, data=b"")
    assert response.status_code == 415


def test_upload_too_large(client, auth_headers, storage, monkeypatch):
    """Test a file over the size limit."""
    monkeypatch.setattr(get_settings(), "max_picture_bytes", 16)

    response = upload(client, auth_headers)
    assert response.status_code == 415
    assert stored_files(storage) == []


def test_upload_rejects_non_image_labelled_as_png(client, auth_headers, storage, db):
    """Test the content is checked, not just the declared type."""
    response = upload(client, auth_headers, name="evil.png", data=b"<script>alert(1)</script>")
    assert response.status_code == 415
    assert response.json() == {"erreur": "problem saving image."}
    assert stored_files(storage) == []
    assert current_user(db, auth_headers.user_id).picture_key is None


def test_upload_rejects_truncated_image(client, auth_headers, storage):
    """Test a file with an image header but no image behind it."""
    response = upload(client, auth_headers, data=b"\x89PNG\r\n\x1a\n" + b"\x00" * 64)
    assert response.status_code == 415
    assert stored_files(storage) == []


def test_upload_rejects_unsupported_image_format(client, auth_headers, storage):
    """Test a real image in a format outside the accepted ones."""
    response = upload(client, auth_headers, name="me.bmp", data=make_image("BMP"))
    assert response.status_code == 415
    assert stored_files(storage) == []


def test_upload_jpeg(client, auth_headers, storage, db):
    """Test another accepted format."""
    response = upload(
        client, auth_headers, name="me.jpg", data=make_image("JPEG"), content_type="image/jpeg"
    )
    assert response.status_code == 200
    assert stored_files(storage) == [current_user(db, auth_headers.user_id).picture_key]


def test_upload_save_failure(client, auth_headers, storage, db, monkeypatch):
    """Test a storage failure leaves the profile untouched."""

    def broken_save(original_name, data):
        raise PictureStorageError("disk full")

    monkeypatch.setattr(storage, "save", broken_save)

    response = upload(client, auth_headers)
    assert response.status_code == 415
    user = current_user(db, auth_headers.user_id)
    assert user.picture == get_settings().default_picture_url
    assert user.picture_key is None


def test_upload_commit_failure_removes_new_file(client, auth_headers, storage, db, monkeypatch):
    """Test a failed commit discards the new file and keeps the old picture."""
    assert upload(client, auth_headers, name="first.png").status_code == 200
    first_key = current_user(db, auth_headers.user_id).picture_key

    def broken_commit():
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", broken_commit)

    response = upload(client, auth_headers, name="second.png")
    assert response.status_code == 415

    monkeypatch.undo()
    assert stored_files(storage) == [first_key]
    assert current_user(db, auth_headers.user_id).picture_key == first_key


def test_upload_cleanup_failure_is_not_fatal(
    client, auth_headers, storage, db, monkeypatch, caplog
):
    """Test failing to remove the previous file does not fail the upload."""
    assert upload(client, auth_headers, name="first.png").status_code == 200
    first_key = current_user(db, auth_headers.user_id).picture_key

    def broken_delete(key):
        raise PermissionError(f"cannot remove {key}")

    monkeypatch.setattr(storage, "delete", broken_delete)

    with caplog.at_level(logging.WARNING, logger="src.api.users"):
        response = upload(client, auth_headers, name="second.png")

    assert response.status_code == 200
    user = current_user(db, auth_headers.user_id)
    assert user.picture_key != first_key
    assert user.picture_key.endswith("_second.png")
    assert any(first_key in record.getMessage() for record in caplog.records)


def test_upload_requires_user(client):
    """Test an anonymous upload."""
    response = upload(client, {})
    assert response.status_code == 404
    assert response.json() == {"erreur": "user not found."}


def test_delete_user_removes_hosted_picture(client, auth_headers, storage):
    """Test deleting the account also removes its hosted picture."""
    assert upload(client, auth_headers).status_code == 200
    assert len(stored_files(storage)) == 1

    assert client.delete("/api/users/current", headers=auth_headers).status_code == 200
    assert stored_files(storage) == []
