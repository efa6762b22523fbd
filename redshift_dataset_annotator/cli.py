"""Command-line interface.

Usage:
    redshift-dataset-annotator configure --host examplecluster.abc123.us-west-1.redshift.amazonaws.com
    redshift-dataset-annotator configure --show
    redshift-dataset-annotator annotate --data-set-id 0f1e2d3c --dry-run --verbose
    redshift-dataset-annotator version

Exit codes: 0 on success, 1 on an annotator error, 130 when interrupted.
"""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from rich.prompt import Confirm, Prompt

from redshift_dataset_annotator import __version__
from redshift_dataset_annotator.annotator import AnnotateOptions, Annotator
from redshift_dataset_annotator.config import settings
from redshift_dataset_annotator.errors import AnnotatorError
from redshift_dataset_annotator.logging_config import get_logger, setup_logging
from redshift_dataset_annotator.profiles import load_profiles, reconfigure
from redshift_dataset_annotator.protocols import AnnotationSourceProtocol, QuickSightProtocol

logger = get_logger(__name__)

PROG = "redshift-dataset-annotator"


class RichPrompter:
    """Interactive prompts on the terminal. Implements profiles.Prompter."""

    def ask(self, text: str, default: str) -> str:
        return Prompt.ask(text, default=default)

    def confirm(self, text: str, default: bool) -> bool:
        return Confirm.ask(text, default=default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Annotate a QuickSight dataset with Redshift column comments",
    )
    parser.add_argument("--aws-account-id", help="QuickSight aws account id")
    parser.add_argument("-r", "--region", help="AWS region (default: AWS_REGION)")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Output log level: debug, info, warn, error (default: LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=settings.log_format,
        help="Log renderer",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser(
        "configure", help="Create a configuration file of redshift-dataset-annotator"
    )
    configure.add_argument("--host", default="", help="Redshift host address")
    configure.add_argument(
        "-s", "--show", action="store_true", help="Show current configuration"
    )

    annotate = subparsers.add_parser(
        "annotate", help="Annotate a QuickSight dataset with Redshift as the data source"
    )
    annotate.add_argument("--data-set-id", required=True, help="QuickSight dataset id")
    annotate.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the update and log the plan without updating the dataset",
    )
    annotate.add_argument(
        "--force-rename",
        action="store_true",
        help="Overwrite renames that already exist instead of keeping them",
    )
    annotate.add_argument(
        "--force-update-description",
        action="store_true",
        help="Overwrite non-empty descriptions that already exist instead of keeping them",
    )
    annotate.add_argument(
        "--verbose",
        action="store_true",
        help="Print the UpdateDataSet input as JSON",
    )

    subparsers.add_parser("version", help="Show version")
    return parser


def cmd_configure(args: argparse.Namespace, out: TextIO, prompter=None) -> int:
    path = settings.config_file
    profiles = load_profiles(path)
    if args.show:
        logger.info("config_file_path", path=str(path))
        print(profiles.to_yaml(), file=out, end="")
        return 0
    reconfigure(profiles, args.host, prompter or RichPrompter(), path)
    return 0


def cmd_annotate(
    args: argparse.Namespace,
    out: TextIO,
    quicksight: QuickSightProtocol | None = None,
    annotation_source: AnnotationSourceProtocol | None = None,
) -> int:
    region = args.region or settings.aws_region
    if quicksight is None or annotation_source is None:
        from redshift_dataset_annotator.clients import (
            LiveQuickSightClient,
            LiveRedshiftAnnotationSource,
        )

        quicksight = quicksight or LiveQuickSightClient(region=region)
        annotation_source = annotation_source or LiveRedshiftAnnotationSource(
            load_profiles(settings.config_file), region=region
        )

    account_id = args.aws_account_id or settings.aws_account_id or quicksight.caller_account_id()
    annotator = Annotator(quicksight, annotation_source, account_id, out=out)
    annotator.annotate(
        AnnotateOptions(
            data_set_id=args.data_set_id,
            dry_run=args.dry_run,
            force_rename=args.force_rename,
            force_update_description=args.force_update_description,
            verbose=args.verbose,
        )
    )
    return 0


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level, args.log_format)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "version":
        print(f"{PROG} {__version__}", file=out)
        return 0

    try:
        if args.command == "configure":
            return cmd_configure(args, out)
        return cmd_annotate(args, out)
    except AnnotatorError as e:
        logger.error("command_failed", command=args.command, error_type=type(e).__name__, error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("interrupted", command=args.command)
        return 130


if __name__ == "__main__":
    sys.exit(main())
