import pytest
from botocore.exceptions import ClientError
from boto3.dynamodb.conditions import Key

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.utils.constants import ENV_IMAGE_METADATA_TABLE_NAME, ENV_SHARES_TABLE_NAME


class TestDynamoDBAdapter:
    def test_init_missing_table_env(self, monkeypatch):
        monkeypatch.delenv(ENV_IMAGE_METADATA_TABLE_NAME, raising=False)

        with pytest.raises(RuntimeError):
            DynamoDBAdapter()

    def test_env_var_selects_table(self, shares_table):
        adapter = DynamoDBAdapter(ENV_SHARES_TABLE_NAME)

        assert adapter.table_name == "test-share-tokens"

    def test_put_and_get_item_success(self, dynamodb_table):
        adapter = DynamoDBAdapter()

        adapter.put_item(item={"key": "2024/a.jpg", "folder": "2024/", "size": 3})

        response = adapter.get_item(key={"key": "2024/a.jpg"})

        assert response["Item"]["folder"] == "2024/"
        assert response["Item"]["size"] == 3

    def test_put_item_with_condition_expression(self, dynamodb_table):
        adapter = DynamoDBAdapter()
        item = {"key": "a.jpg", "folder": "/"}

        adapter.put_item(item=item, condition_expression="attribute_not_exists(folder)")

        with pytest.raises(ClientError) as exc:
            adapter.put_item(item=item, condition_expression="attribute_not_exists(folder)")

        assert exc.value.response["Error"]["Code"] == "ConditionalCheckFailedException"

    def test_delete_item_success(self, dynamodb_table):
        adapter = DynamoDBAdapter()

        adapter.put_item(item={"key": "gone.jpg", "folder": "/"})
        adapter.delete_item(key={"key": "gone.jpg"})

        assert "Item" not in adapter.get_item(key={"key": "gone.jpg"})

    def test_query_index(self, dynamodb_table):
        adapter = DynamoDBAdapter()
        for index, name in enumerate(["b.jpg", "a.jpg"]):
            adapter.put_item(
                item={
                    "key": f"2024/{name}",
                    "folder": "2024/",
                    "name": name,
                    "size": index,
                    "lastModified": index,
                    "tagCount": 0,
                }
            )

        response = adapter.query(
            IndexName="GSI-name",
            KeyConditionExpression=Key("folder").eq("2024/"),
        )

        assert [item["name"] for item in response["Items"]] == ["a.jpg", "b.jpg"]

    def test_scan_page(self, dynamodb_table):
        adapter = DynamoDBAdapter()
        adapter.put_item(item={"key": "a.jpg", "folder": "/"})

        assert adapter.scan()["Count"] == 1

    def test_batch_write_puts_items(self, dynamodb_table):
        adapter = DynamoDBAdapter()

        response = adapter.batch_write(
            requests=[
                {"PutRequest": {"Item": {"key": f"{i}.jpg", "folder": "/"}}}
                for i in range(3)
            ]
        )

        assert response["UnprocessedItems"] == {}
        assert adapter.scan()["Count"] == 3
