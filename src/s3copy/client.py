# src/s3copy/client.py
"""
Object store access for the s3copy pipeline.

The pipeline only talks to the object store through the narrow
`ObjectStoreClient` interface defined here. `S3ObjectStoreClient` is the
boto3-backed implementation; every thread builds its own instance from a
dedicated boto3 session because sessions are not safe to share.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from s3copy.config import AppConfig, Credentials
from s3copy.exceptions import AuthError, ObjectStoreError

if TYPE_CHECKING:
    from types_boto3_s3.client import S3Client
    from types_boto3_s3.type_defs import (
        GetObjectAclOutputTypeDef,
        ListObjectsOutputTypeDef,
    )

logger: logging.Logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class HeadStatus(Enum):
    """Outcome of an existence check against a bucket."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class HeadResult:
    """
    The three-way result of a HEAD request.

    Attributes:
        status (HeadStatus): Whether the object was found, missing, or the
            request itself failed.
        error (BaseException, optional): The failure cause when `status` is
            `ERROR`.
    """

    status: HeadStatus
    error: Optional[BaseException] = None

    @classmethod
    def found(cls) -> "HeadResult":
        return cls(HeadStatus.FOUND)

    @classmethod
    def not_found(cls) -> "HeadResult":
        return cls(HeadStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: BaseException) -> "HeadResult":
        return cls(HeadStatus.ERROR, error)


class ObjectStoreClient(Protocol):
    """The object store operations consumed by the lister and the workers."""

    def list_page(self, bucket: str, marker: str, max_keys: int) -> List[str]:
        ...

    def head_object(self, bucket: str, key: str) -> HeadResult:
        ...

    def get_acl(self, bucket: str, key: str) -> Dict[str, Any]:
        ...

    def put_acl(self, bucket: str, key: str, acl: Dict[str, Any]) -> None:
        ...

    def copy_object(
        self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str
    ) -> None:
        ...

    def validate_credentials(self) -> None:
        ...


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3ObjectStoreClient:
    """An `ObjectStoreClient` backed by a boto3 S3 client."""

    def __init__(self, s3_client: "S3Client") -> None:
        """
        Wrap an existing boto3 S3 client.

        Args:
            s3_client (S3Client): The boto3 client to issue requests with.
        """
        self._s3: "S3Client" = s3_client

    @classmethod
    def from_config(
        cls, credentials: Credentials, app_config: AppConfig
    ) -> "S3ObjectStoreClient":
        """
        Build a client on a fresh boto3 session.

        Args:
            credentials (Credentials): Keys, region and optional endpoint.
            app_config (AppConfig): Supplies retry and timeout settings.

        Returns:
            S3ObjectStoreClient: A client owned by the calling thread.
        """
        boto_config: BotoConfig = BotoConfig(
            signature_version="s3v4",
            retries={"max_attempts": app_config.max_attempts, "mode": "standard"},
            connect_timeout=app_config.connect_timeout,
            read_timeout=app_config.read_timeout,
        )
        session: boto3.session.Session = boto3.session.Session()
        s3_client: "S3Client" = session.client(
            "s3", **credentials.as_boto_dict(), config=boto_config
        )
        return cls(s3_client)

    def list_page(self, bucket: str, marker: str, max_keys: int) -> List[str]:
        """
        Fetch one page of keys following `marker`.

        Args:
            bucket (str): The bucket to list.
            marker (str): List keys strictly after this one ("" to start).
            max_keys (int): Upper bound on the keys returned.

        Returns:
            List[str]: Keys in listing order; empty once the bucket is exhausted.
        """
        try:
            response: "ListObjectsOutputTypeDef" = self._s3.list_objects(
                Bucket=bucket, Marker=marker, MaxKeys=max_keys
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(
                f"Listing s3://{bucket} after '{marker}' failed: {e}"
            ) from e
        return [obj["Key"] for obj in response.get("Contents", [])]

    def head_object(self, bucket: str, key: str) -> HeadResult:
        """
        Check whether an object exists without raising.

        Args:
            bucket (str): The bucket to check.
            key (str): The object key.

        Returns:
            HeadResult: `FOUND`, `NOT_FOUND`, or `ERROR` carrying the cause.
        """
        try:
            self._s3.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return HeadResult.not_found()
            return HeadResult.failed(e)
        except BotoCoreError as e:
            return HeadResult.failed(e)
        return HeadResult.found()

    def get_acl(self, bucket: str, key: str) -> Dict[str, Any]:
        try:
            response: "GetObjectAclOutputTypeDef" = self._s3.get_object_acl(
                Bucket=bucket, Key=key
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(str(e)) from e
        return {"Owner": response["Owner"], "Grants": response.get("Grants", [])}

    def put_acl(self, bucket: str, key: str, acl: Dict[str, Any]) -> None:
        try:
            self._s3.put_object_acl(
                Bucket=bucket, Key=key, AccessControlPolicy=acl  # type: ignore[arg-type]
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(str(e)) from e

    def copy_object(
        self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str
    ) -> None:
        # NOTE: CopyObject is a single server-side request and is capped at
        # 5 GiB per object by S3.
        try:
            self._s3.copy_object(
                Bucket=dst_bucket,
                Key=dst_key,
                CopySource={"Bucket": src_bucket, "Key": src_key},
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(str(e)) from e

    def validate_credentials(self) -> None:
        """
        Confirm the credentials are accepted by listing the caller's buckets.

        Raises:
            AuthError: If the request is rejected or cannot be made.
        """
        try:
            self._s3.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise AuthError(f"Credential validation failed: {e}") from e
        logger.debug("Credentials validated.")
