"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol

from PIL import Image

from .models import ImageType, StoredObject


class S3ClientProtocol(Protocol):
    """Protocol for the subset of the S3 client the pipeline uses."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        ContentLength: int,
        ACL: str,
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class StorageGateway(ABC):
    """Abstract access to source and destination objects."""

    @abstractmethod
    def fetch(self, bucket: str, key: str) -> bytes:
        """Read a source object."""
        ...

    @abstractmethod
    def store(
        self, bucket: str, key: str, body: bytes, content_type: str, label: str = ""
    ) -> StoredObject:
        """Write a derivative object."""
        ...


class ImageTransformer(ABC):
    """Abstract decode / resize / encode operations."""

    @abstractmethod
    def decode(self, data: bytes, image_type: ImageType) -> Image.Image:
        ...

    @abstractmethod
    def resize(self, image: Image.Image, max_dimension: float) -> Image.Image:
        ...

    @abstractmethod
    def encode(self, image: Image.Image, image_type: ImageType) -> bytes:
        ...
