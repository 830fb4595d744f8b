"""S3-compatible object storage snapshot store."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from newsdesk.articles.backup.base import build_backup_key, decode_snapshot, encode_snapshot
from newsdesk.articles.errors import BackupLoadError, BackupSaveError
from newsdesk.articles.models import ArticleSnapshotRecord

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def build_s3_client(*, region_name: str, endpoint_url: str | None = None) -> Any:
    """Boto3 S3 client; credentials come from the standard AWS environment chain."""

    config = Config(
        region_name=region_name,
        retries={"max_attempts": 3, "mode": "adaptive"},
    )
    return boto3.client("s3", endpoint_url=endpoint_url, config=config)


class S3BackupStore:
    """Store one JSON object per day in a bucket."""

    def __init__(self, bucket_name: str, *, client: Any, base_directory: str = "") -> None:
        self.bucket_name = bucket_name
        self.base_directory = base_directory
        self._client = client

    def key_for(self, day: date) -> str:
        return build_backup_key(day, base_directory=self.base_directory)

    def load(self, day: date) -> list[ArticleSnapshotRecord]:
        key = self.key_for(day)
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=key)
            raw = response["Body"].read()
        except ClientError as error:
            if error.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                return []
            raise BackupLoadError(key, error) from error
        except BotoCoreError as error:
            raise BackupLoadError(key, error) from error

        try:
            return decode_snapshot(raw)
        except ValueError as error:
            raise BackupLoadError(key, error) from error

    def save(self, day: date, records: Sequence[ArticleSnapshotRecord]) -> None:
        key = self.key_for(day)
        try:
            self._client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=encode_snapshot(records),
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as error:
            raise BackupSaveError(key, error) from error
        logger.debug("Uploaded %d snapshot records to s3://%s/%s", len(records), self.bucket_name, key)
