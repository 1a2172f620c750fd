"""Custom exceptions for the image derivatives pipeline."""

from __future__ import annotations

from typing import Optional


class ImageDerivativesError(Exception):
    """Base exception for all image derivatives errors."""


class StorageError(ImageDerivativesError):
    """Error raised for S3 read or write failures."""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.error_code = error_code


class ConfigurationError(ImageDerivativesError):
    """Error raised for invalid configuration options."""


class InvalidEventError(ImageDerivativesError):
    """Error raised when the notification payload cannot be used at all."""


class ImageProcessingError(ImageDerivativesError):
    """Error raised when transforming an image fails."""


class DecodeError(ImageProcessingError):
    """Source bytes are not a valid image of the claimed type."""


class EncodeError(ImageProcessingError):
    """The encoder failed to serialize a derivative."""


class FatalWriteError(ImageDerivativesError):
    """A derivative write failed; no further derivatives are written."""

    def __init__(self, message: str, bucket: str, key: str, label: str):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.label = label
