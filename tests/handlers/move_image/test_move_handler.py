import pytest

from handlers.move_image.handler import handler


@pytest.fixture
def stored_image(s3_put_object, dynamodb_table, jpeg_bytes):
    s3_put_object("inbox/trip.jpg", jpeg_bytes, "image/jpeg", {"tags": '["beach"]'})
    s3_put_object("thumbnails/inbox/trip.jpg", b"t", "image/jpeg")


class TestMoveImageHandler:
    def test_moves_object_and_index_record(
        self, lambda_context, api_event, response_body, stored_image, s3_keys, dynamodb_get_item
    ):
        event = api_event("POST", body={"oldKey": "inbox/trip.jpg", "newKey": "2024/trip.jpg"})

        response = handler(event, lambda_context)

        assert response["statusCode"] == 200
        assert response_body(response) == {"success": True}
        assert s3_keys() == ["2024/trip.jpg"]

        record = dynamodb_get_item("2024/trip.jpg")
        assert record["folder"] == "2024/"
        assert record["tags"] == ["beach"]
        assert dynamodb_get_item("inbox/trip.jpg") is None

    def test_missing_source(self, lambda_context, api_event, s3_bucket, dynamodb_table):
        event = api_event("POST", body={"oldKey": "nope.jpg", "newKey": "2024/nope.jpg"})

        assert handler(event, lambda_context)["statusCode"] == 404

    def test_same_key(self, lambda_context, api_event, response_body, stored_image, s3_keys):
        event = api_event("POST", body={"oldKey": "inbox/trip.jpg", "newKey": "inbox/trip.jpg"})

        response = handler(event, lambda_context)

        assert response["statusCode"] == 400
        assert response_body(response)["message"] == "oldKey and newKey must differ"
        assert "inbox/trip.jpg" in s3_keys()

    def test_unsafe_destination(self, lambda_context, api_event, stored_image):
        event = api_event("POST", body={"oldKey": "inbox/trip.jpg", "newKey": "/etc/trip.jpg"})

        assert handler(event, lambda_context)["statusCode"] == 400
