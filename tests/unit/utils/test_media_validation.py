import pytest

from services.errors import ValidationError
from utils.media_validation import BYTES_PER_MB, max_upload_bytes, normalize_content_type, validate_image_upload

LIMIT = max_upload_bytes(5)


def test_limit_defaults_to_five_mebibytes():
    assert LIMIT == 5 * 1024 * 1024
    assert max_upload_bytes(1) == BYTES_PER_MB


@pytest.mark.parametrize("content_type", ["text/plain", "application/pdf", "", None, "video/mp4"])
def test_non_image_types_are_rejected(content_type):
    with pytest.raises(ValidationError, match="archivo de imagen válido"):
        validate_image_upload(content_type, 100, LIMIT)


@pytest.mark.parametrize("content_type", ["image/png", "text/plain", None])
def test_oversized_files_are_rejected_regardless_of_type(content_type):
    with pytest.raises(ValidationError):
        validate_image_upload(content_type, LIMIT + 1, LIMIT)


def test_oversized_image_message_mentions_limit():
    with pytest.raises(ValidationError, match="5 MB"):
        validate_image_upload("image/jpeg", 10 * BYTES_PER_MB, LIMIT)


def test_file_at_the_limit_is_accepted():
    validate_image_upload("image/webp", LIMIT, LIMIT)


def test_content_type_parameters_are_ignored():
    assert normalize_content_type("Image/PNG; charset=binary") == "image/png"
    validate_image_upload("image/png; charset=binary", 10, LIMIT)
