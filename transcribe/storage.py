"""
Google Cloud Storage helpers for staging audio files.

The Speech-to-Text API only accepts long audio by reference, so each input
file is uploaded to a bucket first.  Deletion helpers are best-effort: they
log failures and never raise, which keeps a cleanup error from masking the
failure that triggered the cleanup.
"""

from __future__ import annotations

import logging

from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from .errors import CleanupError, PreconditionError, StorageError

logger = logging.getLogger(__name__)


def new_client(project: str) -> storage.Client:
    """Return a Cloud Storage client using Application Default Credentials."""
    try:
        return storage.Client(project=project)
    except auth_exceptions.GoogleAuthError as exc:
        raise PreconditionError(f"Failed to create GCS client: {exc}") from exc


def gcs_uri(bucket_name: str, object_name: str) -> str:
    return f"gs://{bucket_name}/{object_name}"


def create_bucket(client: storage.Client, project: str, bucket_name: str) -> None:
    """Create a new bucket in the given project.

    Raises:
        PreconditionError: If the bucket cannot be created.  Nothing can be
            staged without it, so the batch stops here.
    """
    try:
        client.create_bucket(bucket_name, project=project)
    except gexc.GoogleAPIError as exc:
        raise PreconditionError(f"Failed to create tmp bucket {bucket_name}: {exc}") from exc


def try_delete_bucket(client: storage.Client, bucket_name: str) -> None:
    """Try to delete the given bucket and log any errors."""
    try:
        client.bucket(bucket_name).delete()
    except Exception as exc:
        logger.warning("%s", CleanupError(f"bucket {bucket_name}", exc))


def upload_file(client: storage.Client, bucket_name: str, object_name: str, filename: str) -> None:
    """Upload a local file to ``bucket_name/object_name``.

    The bucket is assumed to exist.

    Raises:
        StorageError: If the file cannot be read or the upload fails.
    """
    blob = client.bucket(bucket_name).blob(object_name)
    try:
        blob.upload_from_filename(filename)
    except (gexc.GoogleAPIError, OSError) as exc:
        raise StorageError(filename, exc) from exc


def try_delete_object(client: storage.Client, bucket_name: str, object_name: str) -> None:
    """Try to delete the given object and log any errors."""
    try:
        client.bucket(bucket_name).blob(object_name).delete()
    except Exception as exc:
        logger.warning("%s", CleanupError(gcs_uri(bucket_name, object_name), exc))
