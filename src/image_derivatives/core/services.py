"""Service implementations for the image derivatives pipeline."""

from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image

from . import image_utils
from .error_handling import client_error_code, client_error_message, handle_write_failure
from .exceptions import StorageError
from .models import (
    DerivativeSpec,
    HandlerConfig,
    ImageType,
    InvocationResult,
    NotificationRecord,
    Skip,
    StoredObject,
)
from .observability import LogContext, MetricsCollector, timed_operation
from .protocols import (
    ImageTransformer,
    LoggerProtocol,
    S3ClientProtocol,
    StorageGateway,
)
from .router import route

PUBLIC_READ_ACL = "public-read"


class ImageTransformerService(ImageTransformer):
    """Pure image processing service with no I/O dependencies."""

    def decode(self, data: bytes, image_type: ImageType) -> Image.Image:
        return image_utils.decode_image(data, image_type)

    def resize(self, image: Image.Image, max_dimension: float) -> Image.Image:
        return image_utils.resize_image(image, max_dimension)

    def encode(self, image: Image.Image, image_type: ImageType) -> bytes:
        return image_utils.encode_image(image, image_type)


class S3StorageGateway(StorageGateway):
    """Reads source images from S3 and writes public-read derivatives."""

    def __init__(self, s3_client: S3ClientProtocol, logger: LoggerProtocol):
        self._s3_client = s3_client
        self._logger = logger

    def fetch(self, bucket: str, key: str) -> bytes:
        """
        Download an object.

        Raises:
            StorageError: If the object is missing or access is denied
        """
        self._logger.debug(f"Downloading s3://{bucket}/{key}")
        try:
            response = self._s3_client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            message = client_error_message(exc)
            self._logger.error(f"Failed to read {bucket}/{key}: {message}")
            raise StorageError(
                f"Failed to read s3://{bucket}/{key}: {message}",
                bucket=bucket,
                key=key,
                error_code=client_error_code(exc),
            ) from exc

    def store(
        self, bucket: str, key: str, body: bytes, content_type: str, label: str = ""
    ) -> StoredObject:
        """
        Upload a derivative, overwriting whatever is stored under the key.

        Raises:
            StorageError: If S3 rejects the write
        """
        self._logger.info(f"Writing to: {bucket}/{key}")
        try:
            self._s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                ContentLength=len(body),
                ACL=PUBLIC_READ_ACL,
            )
        except (ClientError, BotoCoreError) as exc:
            message = client_error_message(exc)
            self._logger.error(message)
            raise StorageError(
                f"Failed to write s3://{bucket}/{key}: {message}",
                bucket=bucket,
                key=key,
                error_code=client_error_code(exc),
            ) from exc

        return StoredObject(
            label=label,
            bucket=bucket,
            key=key,
            content_type=content_type,
            content_length=len(body),
        )


class DerivativePipeline:
    """Routes one notification and writes every configured derivative."""

    def __init__(
        self,
        storage: StorageGateway,
        transformer: ImageTransformer,
        config: HandlerConfig,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._storage = storage
        self._transformer = transformer
        self._config = config
        self._logger = logger
        self._metrics_collector = metrics_collector

    @property
    def config(self) -> HandlerConfig:
        return self._config

    def run(
        self, event: Dict[str, Any], correlation_id: Optional[str] = None
    ) -> InvocationResult:
        """Handle one notification end to end."""
        decision = route(event, self._logger)
        if isinstance(decision, Skip):
            return InvocationResult(status="skipped", skip_reason=decision.reason)

        log_context = LogContext(component="derivative_pipeline").with_metadata(
            bucket=decision.record.source_bucket,
            key=decision.record.source_key,
        )
        if correlation_id:
            log_context.correlation_id = correlation_id

        return self.process(decision.record, decision.image_type, log_context)

    def process(
        self,
        record: NotificationRecord,
        image_type: ImageType,
        log_context: Optional[LogContext] = None,
    ) -> InvocationResult:
        """Fetch, decode and derive every configured size of one source image."""
        log_context = log_context or LogContext(component="derivative_pipeline")

        with timed_operation("fetch", self._logger, self._metrics_collector, log_context):
            data = self._storage.fetch(record.source_bucket, record.source_key)

        with timed_operation("decode", self._logger, self._metrics_collector, log_context):
            source = self._transformer.decode(data, image_type)

        self._logger.debug(
            f"Decoded {source.width}x{source.height} {image_type.pil_format} source",
            log_context,
        )

        stored: List[StoredObject] = []
        for spec in self._config.derivatives:
            stored.append(self._derive(source, record, image_type, spec, log_context))

        return InvocationResult(status="processed", stored=tuple(stored))

    def _derive(
        self,
        source: Image.Image,
        record: NotificationRecord,
        image_type: ImageType,
        spec: DerivativeSpec,
        log_context: LogContext,
    ) -> StoredObject:
        context = log_context.with_metadata(derivative=spec.label)

        with timed_operation(
            f"resize_{spec.label}", self._logger, self._metrics_collector, context
        ):
            resized = self._transformer.resize(source, spec.max_dimension)

        with timed_operation(
            f"encode_{spec.label}", self._logger, self._metrics_collector, context
        ):
            body = self._transformer.encode(resized, image_type)

        destination = spec.destination_bucket(record.source_bucket)
        try:
            with timed_operation(
                f"store_{spec.label}", self._logger, self._metrics_collector, context
            ):
                stored = self._storage.store(
                    destination,
                    record.source_key,
                    body,
                    image_type.content_type,
                    label=spec.label,
                )
        except StorageError as exc:
            handle_write_failure(
                exc, self._config.write_failure_mode, self._logger, spec.label
            )

        self._logger.info(f"Successfully created {spec.label} at {stored.path}")
        return stored.model_copy(
            update={"width": resized.width, "height": resized.height}
        )
