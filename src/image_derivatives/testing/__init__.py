"""Testing utilities and fakes for the image derivatives pipeline."""

from .fakes import (
    FakeS3Client,
    FakeLogger,
    S3Object,
    S3Bucket,
    create_test_image,
    make_client_error,
    make_s3_event,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "make_client_error",
    "make_s3_event",
    "setup_test_s3_environment",
]
