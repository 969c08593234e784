# src/s3copy/__init__.py
"""
s3copy: A multi-threaded bucket-to-bucket replicator for object stores.

This package copies every object of a source S3-compatible bucket, along
with its ACL, into a destination bucket. One lister thread pages through the
source while a pool of worker threads copies or skips each key.

The primary entry point for programmatic use is the `ReplicationPipeline` class.
"""

from typing import List

from s3copy.pipeline import ReplicationPipeline, RunSummary

__all__: List[str] = ["ReplicationPipeline", "RunSummary"]
