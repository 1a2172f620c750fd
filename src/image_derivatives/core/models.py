"""Shared data models for the image derivatives pipeline."""

import os
from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ConfigurationError


class ImageType(Enum):
    """Image formats the pipeline knows how to derive."""

    JPEG = "jpg"
    PNG = "png"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return "image/jpeg" if self is ImageType.JPEG else "image/png"

    @property
    def pil_format(self) -> str:
        return self.name

    @classmethod
    def from_extension(cls, extension: str) -> Optional["ImageType"]:
        """Return the type for an already lowercased extension, if supported."""
        for image_type in cls:
            if image_type.value == extension:
                return image_type
        return None


class WriteFailureMode(str, Enum):
    """What happens after a derivative write is rejected by S3."""

    EXIT = "exit"
    RAISE = "raise"


class DerivativeSpec(BaseModel):
    """One resized variant to produce for every source image."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    max_dimension: float = Field(gt=0)
    bucket_suffix: str = Field(min_length=1)

    def destination_bucket(self, source_bucket: str) -> str:
        return f"{source_bucket}{self.bucket_suffix}"


THUMBNAIL = DerivativeSpec(label="thumbnail", max_dimension=100, bucket_suffix="-thumb")
LARGE = DerivativeSpec(label="large", max_dimension=2000, bucket_suffix="-large")
DEFAULT_DERIVATIVES: Tuple[DerivativeSpec, ...] = (THUMBNAIL, LARGE)


def parse_derivatives(raw: str) -> Tuple[DerivativeSpec, ...]:
    """
    Parse a derivative list of the form "label:max_dimension:suffix,...".

    Raises:
        ConfigurationError: If an entry is malformed.
    """
    specs = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = entry.split(":")
        if len(parts) != 3:
            raise ConfigurationError(
                f"Invalid derivative entry '{entry}', expected label:max_dimension:suffix"
            )
        label, dimension, suffix = parts
        try:
            specs.append(
                DerivativeSpec(
                    label=label, max_dimension=float(dimension), bucket_suffix=suffix
                )
            )
        except (ValueError, ValidationError) as exc:
            raise ConfigurationError(f"Invalid derivative entry '{entry}': {exc}") from exc

    if not specs:
        raise ConfigurationError("At least one derivative must be configured")
    return tuple(specs)


class HandlerConfig(BaseModel):
    """Configuration for the handler, built once at process start."""

    model_config = ConfigDict(frozen=True)

    derivatives: Tuple[DerivativeSpec, ...] = DEFAULT_DERIVATIVES
    write_failure_mode: WriteFailureMode = WriteFailureMode.EXIT

    @model_validator(mode="after")
    def check_derivatives(self) -> "HandlerConfig":
        if not self.derivatives:
            raise ValueError("At least one derivative must be configured")
        labels = [spec.label for spec in self.derivatives]
        if len(labels) != len(set(labels)):
            raise ValueError(f"Derivative labels must be unique: {labels}")
        return self

    @classmethod
    def from_env(cls) -> "HandlerConfig":
        """
        Build configuration from environment variables.

        Environment Variables:
            IMAGE_DERIVATIVES: "label:max_dimension:suffix,..." (default thumbnail + large)
            WRITE_FAILURE_MODE: "exit" or "raise" (default "exit")
        """
        raw_derivatives = os.getenv("IMAGE_DERIVATIVES", "")
        derivatives = (
            parse_derivatives(raw_derivatives)
            if raw_derivatives.strip()
            else DEFAULT_DERIVATIVES
        )
        mode = os.getenv("WRITE_FAILURE_MODE", WriteFailureMode.EXIT.value).lower()

        try:
            return cls(derivatives=derivatives, write_failure_mode=mode)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid handler configuration: {exc}") from exc


# Inbound S3 notification shape; unknown fields are ignored.


class EventBucket(BaseModel):
    name: str


class EventObject(BaseModel):
    key: str


class EventEntity(BaseModel):
    bucket: EventBucket
    object: EventObject


class EventRecord(BaseModel):
    s3: EventEntity


class NotificationEvent(BaseModel):
    records: List[EventRecord] = Field(alias="Records")


class NotificationRecord(BaseModel):
    """Source location taken from the first notification record."""

    model_config = ConfigDict(frozen=True)

    source_bucket: str
    source_key: str


class Process(BaseModel):
    """Route decision: the object is an image and should be processed."""

    model_config = ConfigDict(frozen=True)

    record: NotificationRecord
    image_type: ImageType


class Skip(BaseModel):
    """Route decision: nothing to do for this object."""

    model_config = ConfigDict(frozen=True)

    reason: str
    key: str = ""


RouteDecision = Union[Process, Skip]


class StoredObject(BaseModel):
    """A derivative written to its destination bucket."""

    model_config = ConfigDict(frozen=True)

    label: str
    bucket: str
    key: str
    content_type: str
    content_length: int
    width: int = 0
    height: int = 0

    @property
    def path(self) -> str:
        return f"{self.bucket}/{self.key}"


class InvocationResult(BaseModel):
    """Outcome of a single handler invocation."""

    model_config = ConfigDict(frozen=True)

    status: Literal["processed", "skipped"]
    stored: Tuple[StoredObject, ...] = ()
    skip_reason: str = ""

    def to_response(self) -> str:
        return "Ok" if self.status == "processed" else ""
