"""S3 binding for the public blob store."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError
from werkzeug.http import http_date

from ..protocols import BlobObject

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})

# GetObject response field -> HTTP response header
_METADATA_HEADERS = {
    "ContentType": "Content-Type",
    "ContentLanguage": "Content-Language",
    "ContentDisposition": "Content-Disposition",
    "ContentEncoding": "Content-Encoding",
    "CacheControl": "Cache-Control",
    "Expires": "Expires",
}


class S3BlobStore:
    """Reads public objects from one S3 bucket.

    The credentials need ``s3:GetObject`` and ``s3:ListBucket`` on the bucket.
    Without ``s3:ListBucket`` S3 answers ``AccessDenied`` instead of
    ``NoSuchKey`` for missing objects, and those reads surface as errors.

    Args:
        bucket: Bucket name.
        client: Optional pre-built S3 client; a default ``boto3.client("s3")``
            is created otherwise.
    """

    def __init__(self, bucket: str, client: Any | None = None) -> None:
        self.bucket = bucket
        self.client = client or boto3.client("s3")

    def get(self, key: str) -> BlobObject | None:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in _MISSING_CODES:
                return None
            if code == "AccessDenied":
                logger.warning(
                    "Access denied reading s3://%s/%s; missing objects need s3:ListBucket to read as 404.",
                    self.bucket,
                    key,
                    extra={"key": key},
                )
            raise

        headers: dict[str, str] = {}
        for field, header in _METADATA_HEADERS.items():
            value = response.get(field)
            if value is None:
                continue
            headers[header] = value if isinstance(value, str) else http_date(value)

        logger.debug("Fetched s3://%s/%s", self.bucket, key)
        return BlobObject(
            body=response["Body"].iter_chunks(),
            etag=response.get("ETag", ""),
            http_metadata=headers,
        )
