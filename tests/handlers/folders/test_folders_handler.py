import pytest

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.services.indexing import refresh_index_record
from handlers.folders.handler import create_handler, delete_handler, list_handler


@pytest.fixture
def tree(s3_put_object, dynamodb_table):
    for key in (
        "2024/",
        "2024/a.jpg",
        "2024/summer/b.jpg",
        "2025/",
        "top.jpg",
        "thumbnails/2024/a.jpg",
        "previews/2024/summer/b.jpg",
    ):
        s3_put_object(key, b"x", "image/jpeg")
    refresh_index_record(S3ImageStorage(), DynamoDBMetadata(), "2024/a.jpg")


class TestListFolders:
    def test_root_hides_derivative_trees(self, lambda_context, api_event, response_body, tree):
        body = response_body(list_handler(api_event(), lambda_context))

        assert body == {
            "folders": [
                {"name": "2024", "path": "2024/"},
                {"name": "2025", "path": "2025/"},
            ]
        }

    def test_nested(self, lambda_context, api_event, response_body, tree):
        body = response_body(list_handler(api_event(query={"prefix": "2024"}), lambda_context))

        assert body["folders"] == [{"name": "summer", "path": "2024/summer/"}]


class TestCreateFolder:
    def test_creates_marker(self, lambda_context, api_event, response_body, s3_bucket, dynamodb_table, s3_keys):
        response = create_handler(api_event("POST", body={"path": "/2026/spring/"}), lambda_context)

        assert response_body(response) == {"success": True}
        assert s3_keys() == ["2026/spring/"]

    def test_requires_path(self, lambda_context, api_event, s3_bucket, dynamodb_table):
        assert create_handler(api_event("POST", body={}), lambda_context)["statusCode"] == 422

    def test_root_is_rejected(self, lambda_context, api_event, response_body, s3_bucket, dynamodb_table):
        response = create_handler(api_event("POST", body={"path": "/"}), lambda_context)

        assert response["statusCode"] == 400
        assert response_body(response)["message"] == "Missing required field: path"


class TestDeleteFolder:
    def test_deletes_contents_and_derivatives(
        self, lambda_context, api_event, response_body, tree, s3_keys, dynamodb_get_item
    ):
        response = delete_handler(api_event("DELETE", body={"path": "2024"}), lambda_context)

        assert response_body(response) == {"success": True}
        assert s3_keys() == ["2025/", "top.jpg"]
        assert dynamodb_get_item("2024/a.jpg") is None

    def test_partial_failure_is_an_error(self, lambda_context, api_event, tree, monkeypatch):
        monkeypatch.setattr(
            S3ImageStorage,
            "remove_images",
            lambda self, *, keys: keys[:1],
        )

        response = delete_handler(api_event("DELETE", body={"path": "2024/"}), lambda_context)

        assert response["statusCode"] == 500
