"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3

from .logging_config import DEFAULT_LOGGER_NAME
from .models import HandlerConfig
from .observability import MetricsCollector, StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import DerivativePipeline, ImageTransformerService, S3StorageGateway


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(
        name: str = DEFAULT_LOGGER_NAME, level: Optional[str] = None
    ) -> LoggerProtocol:
        """Create a configured structured logger."""
        return StructuredLogger(name, level=level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class ProcessingPipelineFactory:
    """Factory for creating the derivative pipeline of one invocation."""

    @staticmethod
    def create_pipeline(
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[HandlerConfig] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> DerivativePipeline:
        """Create a fully configured pipeline; missing dependencies get defaults."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client()

        if logger is None:
            logger = LoggerFactory.create_logger()

        if config is None:
            config = HandlerConfig()

        return DerivativePipeline(
            storage=S3StorageGateway(s3_client, logger),
            transformer=ImageTransformerService(),
            config=config,
            logger=logger,
            metrics_collector=metrics_collector,
        )
