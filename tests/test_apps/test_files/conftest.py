"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.files.infrastructure.metadata import calculate_checksum
from server.apps.files.models import File

_TEST_BUCKET = 'cloud-storage'


@pytest.fixture
def mock_s3():
    """Mock S3 service with cloud-storage bucket.

    Yields:
        boto3 S3 resource with cloud-storage bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket=_TEST_BUCKET)

        yield conn


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test content', name='report.txt')


@pytest.fixture
def stored_file(user, byte_store_dir):
    """Create a file with both bytes and a record, owned by ``user``.

    Args:
        user: Test user fixture.
        byte_store_dir: Storage directory fixture.

    Returns:
        File instance for 'report.txt'.
    """
    content = ContentFile(b'hello world!', name='report.txt')
    byte_store_dir.mkdir(parents=True, exist_ok=True)
    (byte_store_dir / 'report.txt').write_bytes(b'hello world!')

    return File.objects.create(
        owner=user,
        filename='report.txt',
        size_bytes=12,
        checksum=calculate_checksum(content),
    )
