"""Core utilities and shared components for the image derivatives pipeline."""

from .image_utils import (
    calculate_scaled_size,
    decode_image,
    encode_image,
    resize_image,
)
from .logging_config import setup_logger
from .exceptions import (
    ImageDerivativesError,
    ImageProcessingError,
    DecodeError,
    EncodeError,
    StorageError,
    InvalidEventError,
    ConfigurationError,
    FatalWriteError,
)
from .models import (
    DEFAULT_DERIVATIVES,
    DerivativeSpec,
    HandlerConfig,
    ImageType,
    InvocationResult,
    NotificationRecord,
    Process,
    Skip,
    StoredObject,
    WriteFailureMode,
)
from .router import infer_image_type, route

__all__ = [
    "DEFAULT_DERIVATIVES",
    "DerivativeSpec",
    "HandlerConfig",
    "ImageType",
    "InvocationResult",
    "NotificationRecord",
    "Process",
    "Skip",
    "StoredObject",
    "WriteFailureMode",
    "calculate_scaled_size",
    "decode_image",
    "encode_image",
    "resize_image",
    "infer_image_type",
    "route",
    "setup_logger",
    "ImageDerivativesError",
    "ImageProcessingError",
    "DecodeError",
    "EncodeError",
    "StorageError",
    "InvalidEventError",
    "ConfigurationError",
    "FatalWriteError",
]
