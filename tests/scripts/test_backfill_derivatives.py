from scripts.backfill_derivatives import main, parse_args


def test_parse_args_defaults():
    args = parse_args([])

    assert args.bucket is None
    assert args.prefix == ""
    assert args.dry_run is False
    assert args.limit is None


def test_backfills_missing_derivatives(s3_put_object, s3_keys, jpeg_bytes):
    s3_put_object("2024/a.jpg", jpeg_bytes, "image/jpeg")
    s3_put_object("2025/b.jpg", jpeg_bytes, "image/jpeg")

    assert main(["--prefix", "2024/"]) == 0
    assert s3_keys() == [
        "2024/a.jpg",
        "2025/b.jpg",
        "previews/2024/a.jpg",
        "thumbnails/2024/a.jpg",
    ]


def test_dry_run_writes_nothing(s3_put_object, s3_keys, jpeg_bytes):
    s3_put_object("a.jpg", jpeg_bytes, "image/jpeg")

    assert main(["--dry-run"]) == 0
    assert s3_keys() == ["a.jpg"]


def test_failures_exit_non_zero(s3_put_object):
    s3_put_object("broken.jpg", b"nope", "image/jpeg")

    assert main([]) == 1


def test_unknown_bucket_exits_non_zero(aws_mock):
    assert main(["--bucket", "does-not-exist"]) == 1
