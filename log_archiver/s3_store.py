"""S3-compatible remote store built on boto3."""

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from tqdm import tqdm

from .errors import ConnectivityError, NotFoundError, UploadError
from .store import RemoteObject

if TYPE_CHECKING:
    from config import RemoteConfig, RetryConfig

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {'404', 'NoSuchKey', 'NotFound'}

# Retrying these only repeats the same answer
PERMANENT_ERROR_CODES = {
    '403',
    'AccessDenied',
    'InvalidAccessKeyId',
    'SignatureDoesNotMatch',
    'NoSuchBucket',
    'InvalidBucketName',
}


def _error_code(error: ClientError) -> str:
    return str(error.response.get('Error', {}).get('Code', ''))


class S3RemoteStore:
    """RemoteStore for one bucket on an S3-compatible endpoint."""

    def __init__(self, remote: 'RemoteConfig', retry: 'RetryConfig',
                 client=None, show_progress: bool = False,
                 sleep: Callable[[float], None] = time.sleep):
        self.bucket = remote.bucket
        self.retry = retry
        self.show_progress = show_progress
        self._sleep = sleep

        if client is None:
            boto_config = BotoConfig(
                region_name=remote.region,
                retries={'max_attempts': 3, 'mode': 'adaptive'}
            )
            client = boto3.client(
                's3',
                endpoint_url=remote.resolved_endpoint,
                aws_access_key_id=remote.access_key_id,
                aws_secret_access_key=remote.secret_access_key,
                config=boto_config,
            )
        self.s3_client = client

    def check_connection(self, create_missing: bool = False) -> None:
        """Verify we can access the bucket.

        Args:
            create_missing: Create the bucket if it does not exist. Archive
                runs leave this off so a mistyped bucket name aborts the run.
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket)
            logger.info(f"Verified access to bucket: {self.bucket}")
            return
        except ClientError as e:
            error_code = _error_code(e)
            if error_code not in ('404', 'NoSuchBucket'):
                if error_code == '403':
                    raise ConnectivityError(f"Access denied to bucket: {self.bucket}") from e
                raise ConnectivityError(f"Error accessing bucket {self.bucket}: {e}") from e
            if not create_missing:
                raise ConnectivityError(f"Bucket not found: {self.bucket}") from e
        except BotoCoreError as e:
            raise ConnectivityError(f"Cannot reach remote store: {e}") from e

        logger.info(f"Bucket {self.bucket} not found, attempting to create it")
        try:
            self.s3_client.create_bucket(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            raise ConnectivityError(f"Bucket not found and could not be created: {self.bucket}: {e}") from e
        logger.info(f"Created bucket: {self.bucket}")

    def _backoff(self, attempt: int) -> float:
        delay = self.retry.initial_backoff_seconds * (self.retry.backoff_multiplier ** (attempt - 1))
        return min(delay, self.retry.max_backoff_seconds)

    def put(self, local_path: Path, key: str) -> None:
        """Upload a file, retrying transient failures with exponential backoff."""
        local_path = Path(local_path)
        try:
            file_size = local_path.stat().st_size
        except OSError as e:
            raise UploadError(key, f"Cannot read local file: {e}") from e

        attempts = self.retry.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self._upload(local_path, key, file_size)
                logger.debug(f"Uploaded {local_path} to s3://{self.bucket}/{key} (attempt {attempt})")
                return
            except ClientError as e:
                if _error_code(e) in PERMANENT_ERROR_CODES:
                    raise UploadError(key, str(e), attempt) from e
                last_error = e
            except (BotoCoreError, S3UploadFailedError, ConnectionError) as e:
                last_error = e
            except OSError as e:
                raise UploadError(key, f"Cannot read local file: {e}", attempt) from e

            if attempt < attempts:
                delay = self._backoff(attempt)
                logger.warning(
                    f"Upload attempt {attempt}/{attempts} for {key} failed: {last_error}; "
                    f"retrying in {delay:.1f}s"
                )
                self._sleep(delay)

        raise UploadError(key, str(last_error), attempts) from last_error

    def _upload(self, local_path: Path, key: str, file_size: int) -> None:
        with tqdm(total=file_size, unit='B', unit_scale=True,
                  desc=f"  Uploading {local_path.name}", leave=False,
                  disable=not self.show_progress) as pbar:

            def upload_callback(bytes_amount):
                pbar.update(bytes_amount)

            with open(local_path, 'rb') as f:
                self.s3_client.upload_fileobj(
                    f,
                    self.bucket,
                    key,
                    ExtraArgs={
                        'Metadata': {
                            'original_size': str(file_size),
                            'created_by': 'log-archiver'
                        }
                    },
                    Callback=upload_callback
                )

    def stat(self, key: str) -> RemoteObject:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError(key) from e
            raise ConnectivityError(f"Cannot stat {key}: {e}") from e
        except BotoCoreError as e:
            raise ConnectivityError(f"Cannot stat {key}: {e}") from e

        etag: Optional[str] = response.get('ETag')
        return RemoteObject(
            key=key,
            size_bytes=response['ContentLength'],
            etag=etag.strip('"') if etag else None,
            last_modified=response.get('LastModified'),
        )

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        """Yield objects under prefix, one page at a time."""
        paginator = self.s3_client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get('Contents', []):
                    yield RemoteObject(
                        key=item['Key'],
                        size_bytes=item['Size'],
                        etag=item.get('ETag', '').strip('"') or None,
                        last_modified=item.get('LastModified'),
                    )
        except (ClientError, BotoCoreError) as e:
            raise ConnectivityError(f"Cannot list {prefix}: {e}") from e
