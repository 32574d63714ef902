import pytest

from core.utils.config import is_development, validate_config


@pytest.fixture
def full_config(monkeypatch):
    monkeypatch.setenv("IMAGE_S3_BUCKET_NAME", "bucket")
    monkeypatch.setenv("IMAGE_METADATA_TABLE_NAME", "images")
    monkeypatch.setenv("SHARES_TABLE_NAME", "shares")
    monkeypatch.setenv("RATE_LIMIT_TABLE_NAME", "limits")
    monkeypatch.setenv("COGNITO_USER_POOL_ID", "us-east-1_pool")
    monkeypatch.setenv("COGNITO_CLIENT_ID", "client")
    monkeypatch.setenv("AWS_REGION", "us-east-1")


def test_complete_config_is_valid(full_config):
    assert validate_config() == (True, [])


def test_missing_required_variable_is_invalid(full_config, monkeypatch):
    monkeypatch.delenv("IMAGE_S3_BUCKET_NAME")

    valid, errors = validate_config()

    assert valid is False
    assert "IMAGE_S3_BUCKET_NAME is required" in errors


def test_placeholder_counts_as_missing(full_config, monkeypatch):
    monkeypatch.setenv("IMAGE_METADATA_TABLE_NAME", "dummy_table")

    valid, errors = validate_config()

    assert valid is False
    assert "IMAGE_METADATA_TABLE_NAME is required" in errors


def test_missing_optional_variables_only_warn(full_config, monkeypatch):
    monkeypatch.delenv("RATE_LIMIT_TABLE_NAME")
    monkeypatch.setenv("COGNITO_CLIENT_ID", "dummy_client")

    valid, errors = validate_config()

    assert valid is True
    assert errors
    assert all(message.startswith("Warning:") for message in errors)


@pytest.mark.parametrize("value,expected", [("development", True), ("DEVELOPMENT", True), ("prod", False)])
def test_is_development(monkeypatch, value, expected):
    monkeypatch.setenv("ENVIRONMENT", value)

    assert is_development() is expected
