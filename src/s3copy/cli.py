# src/s3copy/cli.py
"""Command-line interface for the s3copy tool."""

import logging
import sys
from typing import Any, Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from s3copy.config import AppConfig, Config, Credentials, ExistenceCheck
from s3copy.exceptions import S3CopyError

logger: logging.Logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Configure rich-based logging for the application, written to stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
                show_level=True,
            )
        ],
    )
    # Silence noisy loggers
    for logger_name in ["boto3", "botocore", "s3transfer", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("bucket_from")
@click.argument("bucket_to")
@click.option(
    "-a",
    "--access",
    required=True,
    envvar="S3COPY_ACCESS_KEY",
    help="Access key ID (required).",
)
@click.option(
    "-s",
    "--secret",
    required=True,
    envvar="S3COPY_SECRET_KEY",
    help="Secret access key (required).",
)
@click.option(
    "-t",
    "--threads",
    type=click.IntRange(min=1),
    default=1,
    help="Number of simultaneous copy threads. Also scales the queue limit "
    "(threads x 1000).",
    show_default=True,
)
@click.option(
    "-c",
    "--clobber",
    is_flag=True,
    default=False,
    help="Overwrite objects that already exist in the destination.",
)
@click.option(
    "--existence-check",
    type=click.Choice([mode.value for mode in ExistenceCheck], case_sensitive=False),
    default=ExistenceCheck.STRICT.value,
    help="How a failed destination HEAD is treated without --clobber: "
    "'strict' fails the worker, 'lenient' treats it as not found.",
    show_default=True,
)
@click.option(
    "--endpoint-url",
    envvar="S3COPY_ENDPOINT_URL",
    default=None,
    help="Custom S3-compatible endpoint URL.",
)
@click.option(
    "--region",
    envvar="S3COPY_REGION",
    default="us-east-1",
    help="Region for the S3 clients.",
    show_default=True,
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set the logging level.",
    show_default=True,
)
def cli(**kwargs: Any) -> None:
    """
    Copy every object in BUCKET_FROM into BUCKET_TO.

    Objects are copied server-side together with their ACLs. One thread
    lists the source bucket while --threads workers copy in parallel. By
    default, objects that already exist in the destination are skipped.

    Credentials may also be set via the S3COPY_ACCESS_KEY and
    S3COPY_SECRET_KEY environment variables or a .env file.
    """
    # Lazily import to keep CLI fast
    from s3copy.pipeline import ReplicationPipeline, RunSummary

    setup_logging(kwargs["log_level"])

    try:
        endpoint_url: Optional[str] = kwargs["endpoint_url"] or None
        config: Config = Config(
            credentials=Credentials(
                access_key_id=kwargs["access"],
                secret_access_key=kwargs["secret"],
                region=kwargs["region"],
                endpoint_url=endpoint_url,
            ),
            source_bucket=kwargs["bucket_from"],
            destination_bucket=kwargs["bucket_to"],
            app=AppConfig(
                thread_count=kwargs["threads"],
                clobber=kwargs["clobber"],
                existence_check=ExistenceCheck(kwargs["existence_check"].lower()),
            ),
        )
        summary: RunSummary = ReplicationPipeline(config).run()
    except S3CopyError as e:
        logger.critical(f"A critical application error occurred: {e}")
        sys.exit(1)
    except Exception:
        logger.critical(
            "An unexpected error caused the application to fail:", exc_info=True
        )
        sys.exit(1)

    if not summary.ok:
        sys.exit(1)


def main() -> None:
    """Console script entry point; loads a .env file before parsing options."""
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
