import base64

import pytest

from surveyhub.errors import DecodeFailure, InvalidImageType
from surveyhub.image_storage import (
    LocalImageStorage,
    decode_image_data_uri,
    delete_image_quietly,
    store_image_data_uri,
)

from .conftest import PNG_DATA_URI


def test_decode_png_data_uri():
    data, ext = decode_image_data_uri(PNG_DATA_URI)
    assert ext == "png"
    assert data.startswith(b"\x89PNG")


def test_extension_is_case_insensitive():
    payload = base64.b64encode(b"gif-bytes").decode()
    _, ext = decode_image_data_uri(f"data:image/GIF;base64,{payload}")
    assert ext == "gif"


def test_spaces_in_payload_are_read_as_plus():
    data, ext = decode_image_data_uri("data:image/jpg;base64,    ")
    assert ext == "jpg"
    assert data == base64.b64decode("++++")


def test_unsupported_extension():
    with pytest.raises(InvalidImageType) as exc_info:
        decode_image_data_uri("data:image/bmp;base64,AAAA")
    assert exc_info.value.ext == "bmp"


@pytest.mark.parametrize(
    "uri",
    [
        "not a data uri",
        "data:text/plain;base64,AAAA",
        "data:image/png;base64,***",
    ],
)
def test_decode_failures(uri):
    with pytest.raises(DecodeFailure):
        decode_image_data_uri(uri)


def test_store_writes_under_images_directory(tmp_path):
    storage = LocalImageStorage(tmp_path)
    token = store_image_data_uri(storage, PNG_DATA_URI)

    assert token.startswith("images/")
    assert token.endswith(".png")
    assert (tmp_path / token).read_bytes().startswith(b"\x89PNG")


def test_stored_names_are_unique(tmp_path):
    storage = LocalImageStorage(tmp_path)
    assert storage.put(b"a", "png") != storage.put(b"a", "png")


def test_delete_removes_file_and_ignores_missing(tmp_path):
    storage = LocalImageStorage(tmp_path)
    token = storage.put(b"abc", "jpg")
    storage.delete(token)
    assert not (tmp_path / token).exists()
    storage.delete(token)


def test_delete_refuses_paths_outside_root(tmp_path):
    storage = LocalImageStorage(tmp_path / "public")
    with pytest.raises(ValueError):
        storage.delete("../secrets.txt")


def test_delete_quietly_logs_instead_of_raising(tmp_path, caplog):
    storage = LocalImageStorage(tmp_path / "public")
    delete_image_quietly(storage, "../../etc/passwd")
    assert "Could not delete image" in caplog.text


def test_line_wrapped_payload_is_accepted():
    raw = b"\x89PNG\r\n\x1a\n" + bytes(range(64))
    encoded = base64.encodebytes(raw).decode()
    assert "\n" in encoded.strip()

    data, ext = decode_image_data_uri("data:image/png;base64," + encoded.replace("\n", "\r\n"))
    assert ext == "png"
    assert data == raw
