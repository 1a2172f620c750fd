"""Main module for the image derivatives CLI."""

import sys
import json
import argparse
from typing import Any, Dict, List, Optional

from . import __version__
from .core.error_handling import with_error_handling
from .core.factories import LoggerFactory, ProcessingPipelineFactory
from .core.models import HandlerConfig


def build_event(bucket: str, key: str) -> Dict[str, Any]:
    """Build a minimal S3 notification for a single object."""
    return {"Records": [{"s3": {"bucket": {"name": bucket}, "object": {"key": key}}}]}


def load_event(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


@with_error_handling
def invoke(event: Dict[str, Any], debug: bool = False) -> str:
    """Run the pipeline once against S3 and return the handler response."""
    logger = LoggerFactory.create_logger(level="DEBUG" if debug else None)
    pipeline = ProcessingPipelineFactory.create_pipeline(
        logger=logger, config=HandlerConfig.from_env()
    )
    return pipeline.run(event).to_response()


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the image derivatives command-line interface.

    The "invoke" command runs one notification through the same pipeline the
    Lambda handler uses, either from a JSON event file or from a bucket and a
    key given on the command line.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="image-derivatives",
        description="Image Derivatives - thumbnail and large variants for S3 images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Derive images for one object
  image-derivatives invoke --bucket my-photos --key photos/cat.jpg

  # Replay a captured S3 notification
  image-derivatives invoke --event-file event.json

  # Show version
  image-derivatives version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    invoke_parser: argparse.ArgumentParser = subparsers.add_parser(
        "invoke", help="Generate derivatives for a single S3 object"
    )
    source = invoke_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--event-file", help="Path to an S3 notification JSON file")
    source.add_argument("--bucket", help="Source S3 bucket")
    invoke_parser.add_argument(
        "--key", help="Source object key (percent-encoded, as S3 sends it)"
    )
    invoke_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "invoke":
        if args.event_file:
            event = load_event(args.event_file)
        else:
            if not args.key:
                parser.error("--key is required with --bucket")
            event = build_event(args.bucket, args.key)

        result = invoke(event, debug=args.debug)
        print(result or "Skipped")

    elif args.command == "version":
        print("Image Derivatives CLI")
        print(f"Version {__version__}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
