"""Integration tests for the complete pipeline."""

import io

import pytest
from PIL import Image

from image_derivatives.core.exceptions import DecodeError, StorageError
from image_derivatives.core.factories import ProcessingPipelineFactory
from image_derivatives.core.models import HandlerConfig, WriteFailureMode
from image_derivatives.testing.fakes import (
    FakeLogger,
    create_test_image,
    make_s3_event,
    setup_test_s3_environment,
)


def _size(fake_s3, bucket, key):
    obj = fake_s3.get_bucket(bucket).get_object(key)
    return Image.open(io.BytesIO(obj.body)).size


class TestPipelineIntegration:
    """Integration tests for the complete processing pipeline."""

    def test_jpeg_source_produces_thumbnail_and_large(self):
        """photos/cat.jpg at 800x600 -> 100x75 thumbnail and 2000x1500 large."""
        fake_s3 = setup_test_s3_environment("photos-bucket")
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        result = pipeline.run(make_s3_event("photos-bucket", "photos/cat.jpg"))

        assert result.to_response() == "Ok"
        assert _size(fake_s3, "photos-bucket-thumb", "photos/cat.jpg") == (100, 75)
        assert _size(fake_s3, "photos-bucket-large", "photos/cat.jpg") == (2000, 1500)

        thumb = fake_s3.get_bucket("photos-bucket-thumb").get_object("photos/cat.jpg")
        assert thumb.content_type == "image/jpeg"
        assert thumb.acl == "public-read"

    def test_non_image_is_skipped(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        result = pipeline.run(make_s3_event("test-source", "notes/readme.txt"))

        assert result.to_response() == ""
        assert fake_s3.put_calls == []

    def test_key_without_extension_is_skipped(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        result = pipeline.run(make_s3_event("test-source", "img/logo"))

        assert result.to_response() == ""
        assert result.skip_reason == "cannot infer type"
        assert fake_s3.operation_count == 0

    def test_small_png_is_upscaled(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        pipeline.run(make_s3_event("test-source", "icons/logo.png"))

        assert _size(fake_s3, "test-source-thumb", "icons/logo.png") == (100, 100)
        assert _size(fake_s3, "test-source-large", "icons/logo.png") == (2000, 2000)
        stored = fake_s3.get_bucket("test-source-thumb").get_object("icons/logo.png")
        assert stored.content_type == "image/png"

    def test_transparent_png_is_stored_as_rgb(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        pipeline.run(make_s3_event("test-source", "icons/overlay.png"))

        obj = fake_s3.get_bucket("test-source-thumb").get_object("icons/overlay.png")
        image = Image.open(io.BytesIO(obj.body))
        assert image.mode == "RGB"
        assert image.size == (100, 50)

    def test_thumbnail_write_denied_exits_before_large(self):
        """A rejected thumbnail write ends the process; no large object is written."""
        fake_s3 = setup_test_s3_environment()
        fake_s3.deny_writes("test-source-thumb")
        logger = FakeLogger()
        pipeline = ProcessingPipelineFactory.create_pipeline(s3_client=fake_s3, logger=logger)

        with pytest.raises(SystemExit) as excinfo:
            pipeline.run(make_s3_event("test-source", "photos/cat.jpg"))

        assert excinfo.value.code == 1
        assert fake_s3.get_bucket("test-source-large").objects == {}
        assert [c["Bucket"] for c in fake_s3.put_calls] == ["test-source-thumb"]
        assert "Access Denied" in logger.messages("ERROR")

    def test_large_write_denied_keeps_thumbnail(self):
        """Earlier derivatives are not rolled back."""
        fake_s3 = setup_test_s3_environment()
        fake_s3.deny_writes("test-source-large")
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        with pytest.raises(SystemExit):
            pipeline.run(make_s3_event("test-source", "photos/cat.jpg"))

        assert fake_s3.get_bucket("test-source-thumb").get_object("photos/cat.jpg")

    def test_corrupt_image_fails_invocation(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3,
            logger=FakeLogger(),
            config=HandlerConfig(write_failure_mode=WriteFailureMode.RAISE),
        )

        with pytest.raises(DecodeError):
            pipeline.run(make_s3_event("test-source", "broken/corrupt.jpg"))
        assert fake_s3.put_calls == []

    def test_missing_source_fails_invocation(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        with pytest.raises(StorageError) as excinfo:
            pipeline.run(make_s3_event("test-source", "photos/dog.jpg"))
        assert excinfo.value.error_code == "NoSuchKey"

    def test_rerun_overwrites_with_identical_bytes(self):
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )
        event = make_s3_event("test-source", "photos/cat.jpg")

        pipeline.run(event)
        first = {
            name: fake_s3.get_bucket(name).get_object("photos/cat.jpg").body
            for name in ("test-source-thumb", "test-source-large")
        }
        pipeline.run(event)

        for name, body in first.items():
            assert fake_s3.get_bucket(name).get_object("photos/cat.jpg").body == body
        assert len(fake_s3.put_calls) == 4

    def test_encoded_key_is_decoded_for_read_and_write(self):
        fake_s3 = setup_test_s3_environment()
        fake_s3.get_bucket("test-source").add_object(
            "summer trip/beach 1.png", create_test_image(40, 80, format="PNG"), "image/png"
        )
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        pipeline.run(make_s3_event("test-source", "summer+trip/beach%201.png"))

        assert _size(fake_s3, "test-source-thumb", "summer trip/beach 1.png") == (50, 100)

    def test_only_first_record_is_processed(self):
        """Multi-record notifications only derive the first object."""
        fake_s3 = setup_test_s3_environment()
        pipeline = ProcessingPipelineFactory.create_pipeline(
            s3_client=fake_s3, logger=FakeLogger()
        )

        pipeline.run(make_s3_event("test-source", "photos/cat.jpg", "icons/logo.png"))

        assert fake_s3.get_bucket("test-source-thumb").get_object("icons/logo.png") is None
        assert len(fake_s3.put_calls) == 2
