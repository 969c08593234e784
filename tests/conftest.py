# tests/conftest.py
"""
Pytest configuration and fixtures for the s3copy test suite.

This module sets up:
- A fresh in-memory fake object store per test (see `tests/fakes.py`).
- A factory for run configurations pointing at the fake buckets.
- Docker fixtures spinning up a MinIO service for the end-to-end tests,
  along with isolated buckets that are cleaned up after each test.
"""

import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import boto3
import pytest
import requests
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError
from requests.exceptions import ConnectionError

from s3copy.config import AppConfig, Config, Credentials
from tests.fakes import DEST_BUCKET, SOURCE_BUCKET, FakeObjectStore

# --- Constants ---
S3_ACCESS_KEY: str = "minio-key"
S3_SECRET_KEY: str = "minio-secret"
S3_REGION: str = "us-east-1"


# --- Application Fixtures ---
@pytest.fixture(scope="function")
def fake_store() -> FakeObjectStore:
    """
    Provide a fake store with empty source and destination buckets.

    Returns:
        FakeObjectStore: The in-memory store.
    """
    store: FakeObjectStore = FakeObjectStore()
    store.create_bucket(SOURCE_BUCKET)
    store.create_bucket(DEST_BUCKET)
    return store


@pytest.fixture(scope="function")
def make_config() -> Callable[..., Config]:
    """
    Provide a factory for run configurations against the fake buckets.

    Keyword arguments are passed through to `AppConfig`.

    Returns:
        Callable[..., Config]: The factory.
    """

    def _factory(**app_kwargs: Any) -> Config:
        return Config(
            credentials=Credentials(
                access_key_id=S3_ACCESS_KEY, secret_access_key=S3_SECRET_KEY
            ),
            source_bucket=SOURCE_BUCKET,
            destination_bucket=DEST_BUCKET,
            app=AppConfig(**app_kwargs),
        )

    return _factory


@pytest.fixture(scope="function")
def emitted() -> List[str]:
    """
    Provide a list that collects lines written by the pipeline.

    Returns:
        List[str]: Lines in emission order; pass `emitted.append` as `emit`.
    """
    return []


# --- Docker Fixtures ---
@pytest.fixture(scope="session")
def docker_compose_file(pytestconfig: pytest.Config) -> str:
    """
    Locate the docker-compose.yml file for the test suite.

    Args:
        pytestconfig (pytest.Config): The pytest configuration objects.

    Returns:
        str: The absolute path to the docker-compose.yml file.
    """
    return str(Path(pytestconfig.rootdir) / "tests" / "docker-compose.yml")


@pytest.fixture(scope="session")
def docker_compose_project_name() -> str:
    """
    Define a unique, static project name for the Docker stack.

    Returns:
        str: A unique name for the docker-compose project.
    """
    return "s3copy-tests"


def _is_s3_responsive(url: str) -> bool:
    """
    Check if the MinIO health endpoint is responsive.

    Args:
        url (str): The base URL of the MinIO API.

    Returns:
        bool: True if the service is responsive, False otherwise.
    """
    try:
        response: requests.Response = requests.get(f"{url}/minio/health/live")
        return response.status_code == 200
    except ConnectionError:
        return False


@pytest.fixture(scope="session")
def s3_service(docker_ip: str, docker_services: Any) -> Dict[str, Any]:
    """
    Ensure the MinIO service is running and return its connection details.

    Args:
        docker_ip (str): The IP address of the Docker host, provided by pytest-docker.
        docker_services (Any): The pytest-docker services fixture.

    Returns:
        Dict[str, Any]: A dictionary with connection details for the S3 service.
    """
    port: int = docker_services.port_for("minio", 9000)
    api_url: str = f"http://{docker_ip}:{port}"
    docker_services.wait_until_responsive(
        timeout=30.0, pause=0.1, check=lambda: _is_s3_responsive(api_url)
    )
    return {
        "endpoint_url": api_url,
        "aws_access_key_id": S3_ACCESS_KEY,
        "aws_secret_access_key": S3_SECRET_KEY,
        "region_name": S3_REGION,
    }


@pytest.fixture(scope="function")
def s3_buckets(
    s3_service: Dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> Generator[Dict[str, str], None, None]:
    """
    Create unique, isolated S3 buckets for a single test function.

    Sets the environment variables read by the CLI and guarantees cleanup
    of buckets and their contents after the test.

    Args:
        s3_service (Dict[str, Any]): Connection details for MinIO.
        monkeypatch (pytest.MonkeyPatch): Scopes the environment variables
            to this test.

    Yields:
        Dict[str, str]: The names of the created source and destination buckets.
    """
    suffix: str = f"test-bucket-{uuid.uuid4()}"
    source_bucket: str = f"source-{suffix}"
    dest_bucket: str = f"dest-{suffix}"

    monkeypatch.setenv("S3COPY_ENDPOINT_URL", s3_service["endpoint_url"])
    monkeypatch.setenv("S3COPY_ACCESS_KEY", S3_ACCESS_KEY)
    monkeypatch.setenv("S3COPY_SECRET_KEY", S3_SECRET_KEY)

    client = boto3.client("s3", **s3_service)
    client.create_bucket(Bucket=source_bucket)
    client.create_bucket(Bucket=dest_bucket)

    yield {"source": source_bucket, "destination": dest_bucket}

    boto_config: BotoConfig = BotoConfig(
        retries={"max_attempts": 0, "mode": "standard"}
    )
    resource = boto3.resource("s3", **s3_service, config=boto_config)
    for bucket in (source_bucket, dest_bucket):
        try:
            bucket_obj = resource.Bucket(bucket)
            bucket_obj.objects.all().delete()
            bucket_obj.delete()
        except ClientError as e:
            if e.response["Error"]["Code"] != "NoSuchBucket":
                raise
