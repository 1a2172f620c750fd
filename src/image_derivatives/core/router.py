"""Event routing: decide whether a notification refers to an image to derive."""

import json
import re
from typing import Any, Dict, Optional
from urllib.parse import unquote_plus

from pydantic import ValidationError

from .exceptions import InvalidEventError
from .models import (
    ImageType,
    NotificationEvent,
    NotificationRecord,
    Process,
    RouteDecision,
    Skip,
)
from .protocols import LoggerProtocol

# Greedy prefix, so the extension is whatever follows the last dot
EXTENSION_PATTERN = re.compile(r".*\.([^.]*)")

SKIP_CANNOT_INFER_TYPE = "cannot infer type"
SKIP_NON_IMAGE = "non-image"


def key_extension(key: str) -> Optional[str]:
    """Lowercased text after the last dot of a key, or None if it has no dot."""
    match = EXTENSION_PATTERN.fullmatch(key)
    return match.group(1).lower() if match else None


def infer_image_type(key: str) -> Optional[ImageType]:
    """Classify an object key by its extension; None if it is not a supported image."""
    extension = key_extension(key)
    return ImageType.from_extension(extension) if extension is not None else None


def parse_record(event: Dict[str, Any], logger: LoggerProtocol) -> NotificationRecord:
    """
    Extract the first notification record, with its key URL-decoded.

    Raises:
        InvalidEventError: If the event is malformed or carries no records
    """
    try:
        notification = NotificationEvent.model_validate(event)
    except ValidationError as exc:
        raise InvalidEventError(f"Malformed S3 notification: {exc}") from exc

    if not notification.records:
        raise InvalidEventError("S3 notification contains no records")

    if len(notification.records) > 1:
        # Only the first record is handled
        logger.warning(
            f"Notification carries {len(notification.records)} records; "
            f"ignoring {len(notification.records) - 1}"
        )

    first = notification.records[0].s3
    return NotificationRecord(
        source_bucket=first.bucket.name,
        source_key=unquote_plus(first.object.key),
    )


def route(event: Dict[str, Any], logger: LoggerProtocol) -> RouteDecision:
    """Parse a notification and decide whether it should be processed."""
    logger.info("EVENT: " + json.dumps(event, indent=2, default=str))

    record = parse_record(event, logger)
    key = record.source_key

    extension = key_extension(key)
    if extension is None:
        logger.info(f"Unable to infer image type for key {key}")
        return Skip(reason=SKIP_CANNOT_INFER_TYPE, key=key)

    image_type = ImageType.from_extension(extension)
    if image_type is None:
        logger.info(f"Skipping non-image {key}")
        return Skip(reason=SKIP_NON_IMAGE, key=key)

    return Process(record=record, image_type=image_type)
