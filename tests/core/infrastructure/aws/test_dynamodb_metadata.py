from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.infrastructure.aws import dynamodb_metadata
from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata, record_from_head
from core.models.errors import DynamoDBError, ValidationError
from core.models.image import IndexRecord, TagCount


def _record(key: str, size: int = 1, last_modified: int = 1, tags=None) -> IndexRecord:
    return IndexRecord(
        key=key,
        name=key.rsplit("/", 1)[-1],
        size=size,
        last_modified=last_modified,
        tags=tags or [],
    )


@pytest.fixture
def metadata(dynamodb_table) -> DynamoDBMetadata:
    return DynamoDBMetadata()


class _CountingAdapter:
    """Wraps a real adapter and counts batch_write calls."""

    def __init__(self, inner: DynamoDBAdapter, unprocessed_rounds: int = 0) -> None:
        self._inner = inner
        self.table_name = inner.table_name
        self.batch_calls = 0
        self.unprocessed_rounds = unprocessed_rounds

    def batch_write(self, *, requests):
        self.batch_calls += 1
        if self.unprocessed_rounds:
            self.unprocessed_rounds -= 1
            return {"UnprocessedItems": {self.table_name: requests[:1]}}
        return self._inner.batch_write(requests=requests)

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_record_from_head():
    head = {
        "ContentLength": 2048,
        "LastModified": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }

    record = record_from_head("2024/trip.jpg", head, tags=["beach"])

    assert record.folder == "2024/"
    assert record.name == "trip.jpg"
    assert record.size == 2048
    assert record.last_modified == 1704067200000
    assert record.tag_count == 1


class TestSingleItemOperations:
    def test_upsert_and_get(self, metadata, dynamodb_get_item):
        metadata.upsert(_record("2024/a.jpg", tags=["x"]))

        stored = dynamodb_get_item("2024/a.jpg")
        record = metadata.get("2024/a.jpg")

        assert stored["folder"] == "2024/"
        assert "updatedAt" in stored
        assert record.tags == ["x"]
        assert record.tag_count == 1

    def test_get_missing(self, metadata):
        assert metadata.get("missing.jpg") is None

    def test_delete(self, metadata):
        metadata.upsert(_record("a.jpg"))

        metadata.delete("a.jpg")
        metadata.delete("a.jpg")

        assert metadata.get("a.jpg") is None

    def test_update_tags_existing(self, metadata):
        metadata.upsert(_record("a.jpg"))

        assert metadata.update_tags("a.jpg", ["a", "b"]) is True

        record = metadata.get("a.jpg")
        assert record.tags == ["a", "b"]
        assert record.tag_count == 2

    def test_update_tags_missing_record(self, metadata):
        assert metadata.update_tags("missing.jpg", ["a"]) is False
        assert metadata.get("missing.jpg") is None

    def test_aws_errors_are_translated(self, metadata, monkeypatch):
        def boom(**_):
            raise ClientError({"Error": {"Code": "InternalServerError"}}, "PutItem")

        monkeypatch.setattr(metadata._db, "put_item", boom)

        with pytest.raises(DynamoDBError):
            metadata.upsert(_record("a.jpg"))


class TestQuery:
    def test_size_desc_with_limit(self, metadata):
        for key, size in [("2024/a.jpg", 10), ("2024/b.jpg", 30), ("2024/c.jpg", 20)]:
            metadata.upsert(_record(key, size=size))
        metadata.upsert(_record("2025/huge.jpg", size=999))

        items, cursor = metadata.query("2024/", sort_by="size", order="desc", limit=2)

        assert [r.key for r in items] == ["2024/b.jpg", "2024/c.jpg"]
        assert cursor is not None

        rest, cursor = metadata.query("2024/", sort_by="size", order="desc", limit=2, cursor=cursor)

        assert [r.key for r in rest] == ["2024/a.jpg"]

    def test_root_folder(self, metadata):
        metadata.upsert(_record("top.jpg"))
        metadata.upsert(_record("2024/nested.jpg"))

        items, _ = metadata.query("", sort_by="name", order="asc")

        assert [r.key for r in items] == ["top.jpg"]

    def test_record_without_folder_lands_in_its_key_prefix(self, metadata):
        metadata.upsert(IndexRecord(key="2024/a.jpg", size=5, last_modified=1))

        nested, _ = metadata.query("2024/", sort_by="size", order="desc", limit=2)
        root, _ = metadata.query("")

        assert [r.key for r in nested] == ["2024/a.jpg"]
        assert nested[0].name == "a.jpg"
        assert root == []

    def test_date_desc_is_default(self, metadata):
        metadata.upsert(_record("old.jpg", last_modified=1))
        metadata.upsert(_record("new.jpg", last_modified=2))

        items, cursor = metadata.query("")

        assert [r.key for r in items] == ["new.jpg", "old.jpg"]
        assert cursor is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"sort_by": "colour"}, {"order": "up"}, {"limit": 0}, {"limit": 1001}],
    )
    def test_invalid_arguments(self, metadata, kwargs):
        with pytest.raises(ValidationError):
            metadata.query("", **kwargs)

    def test_invalid_cursor(self, metadata):
        with pytest.raises(ValidationError):
            metadata.query("", cursor="bm90IGpzb24")


class TestBatchUpsert:
    def test_chunks_of_25(self, dynamodb_table):
        adapter = _CountingAdapter(DynamoDBAdapter())
        metadata = DynamoDBMetadata(adapter)

        calls = metadata.batch_upsert([_record(f"img-{i:02d}.jpg") for i in range(53)])

        assert calls == 3
        assert adapter.batch_calls == 3
        assert dynamodb_table.scan()["Count"] == 53

    def test_unprocessed_items_are_retried(self, dynamodb_table, monkeypatch):
        monkeypatch.setattr(dynamodb_metadata.time, "sleep", lambda _: None)
        adapter = _CountingAdapter(DynamoDBAdapter(), unprocessed_rounds=1)

        calls = DynamoDBMetadata(adapter).batch_upsert([_record("a.jpg"), _record("b.jpg")])

        assert calls == 2

    def test_gives_up_after_retries(self, dynamodb_table, monkeypatch):
        monkeypatch.setattr(dynamodb_metadata.time, "sleep", lambda _: None)
        adapter = _CountingAdapter(DynamoDBAdapter(), unprocessed_rounds=100)

        with pytest.raises(DynamoDBError):
            DynamoDBMetadata(adapter).batch_upsert([_record("a.jpg")])

    def test_empty(self, metadata):
        assert metadata.batch_upsert([]) == 0


def test_scan_tag_counts(metadata):
    metadata.upsert(_record("a.jpg", tags=["beach", "sun"]))
    metadata.upsert(_record("b.jpg", tags=["beach"]))
    metadata.upsert(_record("c.jpg"))

    assert metadata.scan_tag_counts() == [
        TagCount(tag="beach", count=2),
        TagCount(tag="sun", count=1),
    ]
