# src/s3copy/config.py
"""
Configuration for the s3copy pipeline.

This module centralizes all configuration into typed, immutable dataclasses.
A single `Config` value is built once at startup and handed to every thread
when it is spawned; nothing in the pipeline reads global run state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from s3copy.exceptions import ConfigError


class ExistenceCheck(Enum):
    """How a worker interprets a failed HEAD against the destination."""

    # Only a genuine "not found" means the object is absent.
    STRICT = "strict"
    # Any HEAD failure, transport errors included, counts as "not found".
    LENIENT = "lenient"


@dataclass(frozen=True)
class Credentials:
    """
    Represents the credentials and endpoint shared by both buckets.

    Attributes:
        access_key_id (str): The access key ID.
        secret_access_key (str): The secret access key.
        region (str): The AWS region.
        endpoint_url (str, optional): A custom S3-compatible endpoint URL.
    """

    access_key_id: str
    secret_access_key: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.access_key_id or not self.secret_access_key:
            raise ConfigError("Both an access key and a secret key must be set.")

    def as_boto_dict(self) -> Dict[str, Optional[str]]:
        """
        Returns the credentials as a dictionary suitable for boto3 clients.

        Returns:
            Dict[str, Optional[str]]: A dictionary of client parameters.
        """
        return {
            "endpoint_url": self.endpoint_url,
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "region_name": self.region,
        }

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"secret_access_key='***', region={self.region!r}, "
            f"endpoint_url={self.endpoint_url!r})"
        )


@dataclass(frozen=True)
class AppConfig:
    """
    Defines the application's operational parameters.

    Attributes:
        thread_count (int): Number of copy worker threads.
        clobber (bool): Overwrite destination objects that already exist.
        existence_check (ExistenceCheck): How HEAD errors are interpreted
            when `clobber` is off.
        page_size (int): Keys requested per listing page.
        queue_factor (int): Queued keys allowed per worker before the
            lister throttles itself.
        progress_interval (int): Copy+skip events between progress lines.
        max_attempts (int): botocore retry attempts per API call.
        connect_timeout (int): Socket connect timeout in seconds.
        read_timeout (int): Socket read timeout in seconds.
    """

    thread_count: int = 1
    clobber: bool = False
    existence_check: ExistenceCheck = ExistenceCheck.STRICT
    page_size: int = 1000
    queue_factor: int = 1000
    progress_interval: int = 1000
    max_attempts: int = 5
    connect_timeout: int = 10
    read_timeout: int = 60

    def __post_init__(self) -> None:
        if self.thread_count < 1:
            raise ConfigError(
                f"Thread count must be at least 1, got {self.thread_count}."
            )
        for name in ("page_size", "queue_factor", "progress_interval"):
            if getattr(self, name) < 1:
                raise ConfigError(f"'{name}' must be a positive integer.")

    @property
    def max_queue(self) -> int:
        """
        Queue depth above which the lister stops fetching pages.

        Returns:
            int: `thread_count` multiplied by `queue_factor`.
        """
        return self.thread_count * self.queue_factor


@dataclass(frozen=True)
class Config:
    """
    Top-level configuration container for a replication run.

    Attributes:
        credentials (Credentials): Credentials used by every client.
        source_bucket (str): The bucket to copy from.
        destination_bucket (str): The bucket to copy to.
        app (AppConfig): General application settings.
    """

    credentials: Credentials
    source_bucket: str
    destination_bucket: str
    app: AppConfig = field(default_factory=AppConfig)

    def __post_init__(self) -> None:
        if not self.source_bucket or not self.destination_bucket:
            raise ConfigError("Both bucket_from and bucket_to must be given.")
        if self.source_bucket == self.destination_bucket:
            raise ConfigError(
                f"Source and destination bucket are both '{self.source_bucket}'."
            )
