import pytest

from core.models.errors import InvalidKeyError
from core.utils.constants import ERROR_CODE_INVALID_PREFIX
from core.utils.keys import (
    folder_of,
    is_derivative_key,
    is_folder_marker,
    is_image_key,
    name_of,
    preview_key,
    thumbnail_key,
    validate_key,
    validate_prefix,
)


class TestValidateKey:
    @pytest.mark.parametrize(
        "key",
        [
            "trip.jpg",
            "2024/trip.jpg",
            "2024/summer/beach day.PNG",
            "a" * 1024,
            "notes\twith\ttabs.txt",
        ],
    )
    def test_accepts_safe_keys(self, key):
        validate_key(key)

    @pytest.mark.parametrize(
        "key,message",
        [
            ("", "non-empty"),
            (None, "non-empty"),
            (42, "non-empty"),
            ("../etc/passwd", "path traversal"),
            ("2024/../secret.jpg", "path traversal"),
            ("2024//trip.jpg", "path traversal"),
            ("/2024/trip.jpg", "path traversal"),
            ("trip\x00.jpg", "null bytes"),
            ("trip\x07.jpg", "control characters"),
            ("a" * 1025, "maximum length"),
        ],
    )
    def test_rejects_unsafe_keys(self, key, message):
        with pytest.raises(InvalidKeyError) as exc:
            validate_key(key)

        assert message in exc.value.message


class TestValidatePrefix:
    @pytest.mark.parametrize(
        "prefix,expected",
        [
            (None, ""),
            ("", ""),
            ("/", ""),
            ("2024", "2024/"),
            ("2024/", "2024/"),
            ("/2024/summer/", "2024/summer/"),
            ("  2024  ", "2024/"),
        ],
    )
    def test_normalizes(self, prefix, expected):
        assert validate_prefix(prefix) == expected

    @pytest.mark.parametrize("prefix", ["2024/../x", "a//b", "bad\x01name"])
    def test_rejects_unsafe_prefix(self, prefix):
        with pytest.raises(InvalidKeyError) as exc:
            validate_prefix(prefix)

        assert exc.value.error_code == ERROR_CODE_INVALID_PREFIX

    def test_rejects_non_string(self):
        with pytest.raises(InvalidKeyError):
            validate_prefix(["2024"])


def test_folder_and_name():
    assert folder_of("2024/summer/trip.jpg") == "2024/summer/"
    assert folder_of("trip.jpg") == ""
    assert name_of("2024/summer/trip.jpg") == "trip.jpg"
    assert name_of("trip.jpg") == "trip.jpg"


def test_derivative_keys_mirror_the_original():
    assert thumbnail_key("2024/trip.jpg") == "thumbnails/2024/trip.jpg"
    assert preview_key("2024/trip.jpg") == "previews/2024/trip.jpg"
    assert is_derivative_key("thumbnails/2024/trip.jpg")
    assert is_derivative_key("previews/trip.jpg")
    assert not is_derivative_key("2024/thumbnails/trip.jpg")


def test_markers_and_image_extensions():
    assert is_folder_marker("2024/")
    assert not is_folder_marker("2024/trip.jpg")
    assert is_image_key("2024/TRIP.JPEG")
    assert is_image_key("a.webp")
    assert not is_image_key("notes.txt")
