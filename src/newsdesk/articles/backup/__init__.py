"""Daily article snapshot stores."""

from newsdesk.articles.backup.base import BackupStore, build_backup_key
from newsdesk.articles.backup.local import LocalBackupStore
from newsdesk.articles.backup.s3 import S3BackupStore, build_s3_client
from newsdesk.config import BackupSettings


def build_backup_store(settings: BackupSettings) -> BackupStore:
    """Select the configured snapshot backend."""

    if settings.backend == "s3":
        if not settings.bucket_name:
            raise ValueError("NEWSDESK_BACKUP_S3_BUCKET is required for the s3 backup backend.")
        return S3BackupStore(
            settings.bucket_name,
            client=build_s3_client(
                region_name=settings.region_name,
                endpoint_url=settings.endpoint_url,
            ),
            base_directory=settings.base_directory,
        )
    return LocalBackupStore(settings.local_dir)


__all__ = [
    "BackupStore",
    "LocalBackupStore",
    "S3BackupStore",
    "build_backup_key",
    "build_backup_store",
]
