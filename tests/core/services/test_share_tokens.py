import re

import pytest

from core.infrastructure.aws.dynamodb_shares import DynamoDBShares
from core.models.errors import NotFoundError, PermissionDeniedError, ShareTokenGenerationError
from core.models.share import ShareRecord
from core.services.share_tokens import ShareTokenService, clamp_expiry_days, generate_token

DAY_MS = 24 * 60 * 60 * 1000


class _Clock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def service(shares_table, clock) -> ShareTokenService:
    return ShareTokenService(DynamoDBShares(), clock=clock)


def test_generate_token_is_url_safe():
    token = generate_token()

    assert len(token) == 43
    assert re.fullmatch(r"[A-Za-z0-9_-]+", token)
    assert generate_token() != token


@pytest.mark.parametrize("days,expected", [(None, 7), (0, 1), (-5, 1), (7, 7), (30, 30), (90, 30)])
def test_clamp_expiry_days(days, expected):
    assert clamp_expiry_days(days) == expected


class TestCreateAndResolve:
    def test_round_trip(self, service, clock):
        record = service.create("2024/trip.jpg", 3, created_by="user-1")

        resolved = service.resolve(record.share_token)

        assert resolved == record
        assert record.created_at == clock.now
        assert record.expires_at == clock.now + 3 * DAY_MS

    def test_expired_share_does_not_resolve(self, service, clock):
        record = service.create("a.jpg", 1)

        clock.now = record.expires_at
        assert service.resolve(record.share_token) is not None

        clock.now = record.expires_at + 1
        assert service.resolve(record.share_token) is None

    def test_unknown_and_empty_tokens(self, service):
        assert service.resolve("nope") is None
        assert service.resolve("") is None

    def test_retries_on_collision(self, shares_table, clock):
        repository = DynamoDBShares()
        repository.put(ShareRecord(share_token="taken", image_key="x.jpg", created_at=0, expires_at=1))
        tokens = iter(["taken", "fresh"])

        service = ShareTokenService(repository, clock=clock, token_factory=lambda: next(tokens))

        assert service.create("a.jpg").share_token == "fresh"

    def test_gives_up_after_ten_attempts(self, shares_table, clock):
        repository = DynamoDBShares()
        repository.put(ShareRecord(share_token="taken", image_key="x.jpg", created_at=0, expires_at=1))
        attempts = []

        def factory():
            attempts.append(1)
            return "taken"

        service = ShareTokenService(repository, clock=clock, token_factory=factory)

        with pytest.raises(ShareTokenGenerationError):
            service.create("a.jpg")

        assert len(attempts) == 10


class TestDelete:
    def test_owner_can_delete(self, service):
        record = service.create("a.jpg", created_by="user-1")

        service.delete(record.share_token, "user-1")

        assert service.resolve(record.share_token) is None

    def test_other_user_cannot_delete(self, service):
        record = service.create("a.jpg", created_by="user-1")

        with pytest.raises(PermissionDeniedError):
            service.delete(record.share_token, "user-2")

        assert service.resolve(record.share_token) is not None

    def test_anonymous_share_can_be_deleted_by_anyone(self, service):
        record = service.create("a.jpg")

        service.delete(record.share_token, "user-2")

        assert service.resolve(record.share_token) is None

    def test_unknown_token(self, service):
        with pytest.raises(NotFoundError) as exc:
            service.delete("nope", "user-1")

        assert exc.value.message == "Share link not found or expired"
