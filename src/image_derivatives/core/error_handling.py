# src/image_derivatives/core/error_handling.py

import functools
import logging
import sys
from typing import NoReturn

from botocore.exceptions import BotoCoreError, ClientError
from PIL import UnidentifiedImageError

from .exceptions import DecodeError, FatalWriteError, StorageError
from .models import WriteFailureMode


def client_error_message(error: Exception) -> str:
    """Return the backend-provided message of a botocore error, if it has one."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        return details.get("Message") or details.get("Code") or str(error)
    return str(error)


def client_error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def with_error_handling(func):
    """
    A decorator to wrap functions with standardized error handling.

    botocore failures become StorageError and unidentifiable images become
    DecodeError; anything else is logged and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            if isinstance(e, (ClientError, BotoCoreError)):
                raise StorageError(
                    f"S3 operation failed in {func.__name__}: {client_error_message(e)}",
                    error_code=client_error_code(e),
                ) from e
            if isinstance(e, UnidentifiedImageError):
                raise DecodeError(f"Failed to identify image in {func.__name__}: {e}") from e
            raise
    return wrapper


def handle_write_failure(
    error: StorageError,
    mode: WriteFailureMode,
    logger,
    label: str,
) -> NoReturn:
    """
    Apply the write failure policy after a derivative could not be stored.

    In EXIT mode the process terminates with status 1, the behaviour expected
    of a one-shot Lambda invocation. In RAISE mode a FatalWriteError is raised
    instead. Either way no further derivatives are written and earlier writes
    stay in place.
    """
    bucket = error.bucket or ""
    key = error.key or ""
    logger.error(
        f"Failed to store {label} derivative at {bucket}/{key}; "
        f"aborting remaining derivatives"
    )

    if mode is WriteFailureMode.EXIT:
        sys.exit(1)

    raise FatalWriteError(str(error), bucket=bucket, key=key, label=label) from error
