import pytest

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.models.image import IndexRecord
from handlers.query_images.handler import handler


@pytest.fixture
def indexed(s3_bucket, dynamodb_table):
    index = DynamoDBMetadata()
    for name, size, modified, tags in [
        ("a.jpg", 10, 3, ["x"]),
        ("b.jpg", 30, 1, []),
        ("c.jpg", 20, 2, ["x", "y"]),
    ]:
        index.upsert(
            IndexRecord(
                key=f"2024/{name}",
                name=name,
                size=size,
                last_modified=modified,
                tags=tags,
                thumbnail_key=f"thumbnails/2024/{name}" if name == "a.jpg" else None,
            )
        )
    return index


class TestQueryImagesHandler:
    def test_default_sort_is_newest_first(self, lambda_context, api_event, response_body, indexed):
        body = response_body(handler(api_event(query={"folder": "2024/"}), lambda_context))

        assert [i["name"] for i in body["images"]] == ["a.jpg", "c.jpg", "b.jpg"]
        assert body["nextCursor"] is None
        assert "thumbnails/2024/a.jpg" in body["images"][0]["thumbnailUrl"]
        assert body["images"][0]["tags"] == ["x"]

    def test_size_desc_pages(self, lambda_context, api_event, response_body, indexed):
        query = {"folder": "2024", "sortBy": "size", "order": "desc", "limit": "2"}

        first = response_body(handler(api_event(query=query), lambda_context))
        second = response_body(
            handler(api_event(query={**query, "cursor": first["nextCursor"]}), lambda_context)
        )

        assert [i["size"] for i in first["images"]] == [30, 20]
        assert [i["size"] for i in second["images"]] == [10]

    def test_sort_by_tags(self, lambda_context, api_event, response_body, indexed):
        body = response_body(
            handler(
                api_event(query={"folder": "2024/", "sortBy": "tags", "order": "desc"}),
                lambda_context,
            )
        )

        assert body["images"][0]["name"] == "c.jpg"

    @pytest.mark.parametrize(
        "query",
        [{"sortBy": "colour"}, {"order": "sideways"}, {"limit": "0"}, {"limit": "1001"}],
    )
    def test_invalid_parameters(self, lambda_context, api_event, indexed, query):
        response = handler(api_event(query=query), lambda_context)

        assert response["statusCode"] == 422

    def test_bad_cursor(self, lambda_context, api_event, response_body, indexed):
        response = handler(api_event(query={"cursor": "garbage!"}), lambda_context)

        assert response["statusCode"] == 400
        assert response_body(response)["error"] == "INVALID_CURSOR"
