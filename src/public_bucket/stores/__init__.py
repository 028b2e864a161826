"""
Backing store bindings.

- InMemoryKeyValueStore / InMemoryBlobStore: in-process (tests, local runs)
- RedisKeyValueStore: short links in redis
- S3BlobStore: public objects in an S3 bucket
"""

from .memory import InMemoryBlobStore, InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore
from .s3 import S3BlobStore

__all__ = [
    "InMemoryBlobStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "S3BlobStore",
]
