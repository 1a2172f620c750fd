"""AWS Lambda entry point for generating image derivatives."""

import functools
from typing import Any, Dict, Optional

from .core.error_handling import with_error_handling
from .core.factories import ProcessingPipelineFactory
from .core.models import HandlerConfig


@functools.lru_cache(maxsize=1)
def get_config() -> HandlerConfig:
    """Load the immutable handler configuration once per process."""
    return HandlerConfig.from_env()


@with_error_handling
def handler(event: Dict[str, Any], context: Optional[Any] = None) -> str:
    """
    Generate derivatives for the object named by an S3 notification.

    Returns "Ok" once every derivative is stored and "" when the object is
    skipped. Read and decode failures propagate to the Lambda runtime; a
    rejected write ends the process unless WRITE_FAILURE_MODE is "raise".
    """
    # A new S3 client per invocation, nothing is shared between events
    pipeline = ProcessingPipelineFactory.create_pipeline(config=get_config())
    result = pipeline.run(event, correlation_id=getattr(context, "aws_request_id", None))
    return result.to_response()
