"""Tests for file operations business logic."""

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import DatabaseError

from server.apps.files.exceptions import (
    FileConflictError,
    FileForbiddenError,
    FileNotFoundInStoreError,
    InvalidArgumentError,
    StorageFailureError,
)
from server.apps.files.infrastructure.metadata import calculate_checksum
from server.apps.files.logic.file_operations import (
    FileInfo,
    delete_file,
    download_file,
    list_files,
    rename_file,
    upload_file,
)
from server.apps.files.models import File


@pytest.mark.django_db
def test_upload_file_success(user, byte_store_dir, sample_file_content):
    """Test successful file upload (bytes + record)."""
    file_instance = upload_file(user, sample_file_content)

    assert file_instance.id is not None
    assert file_instance.owner == user
    assert file_instance.filename == 'report.txt'
    assert file_instance.size_bytes == len(b'test content')
    assert file_instance.checksum == calculate_checksum(
        ContentFile(b'test content'),
    )
    assert (byte_store_dir / 'report.txt').read_bytes() == b'test content'


@pytest.mark.django_db
def test_upload_then_download_round_trip(user):
    """Test that download returns exactly the uploaded bytes."""
    payload = bytes(range(256)) * 50

    upload_file(user, ContentFile(payload, name='data.pdf'))

    assert download_file('data.pdf') == payload


@pytest.mark.django_db
def test_upload_file_explicit_filename(user, byte_store_dir):
    """Test that an explicit filename overrides the payload name."""
    upload_file(user, ContentFile(b'abc', name='ignored.txt'), 'notes.txt')

    assert File.objects.filter(filename='notes.txt').exists()
    assert (byte_store_dir / 'notes.txt').exists()


@pytest.mark.django_db
def test_upload_file_conflict_with_bytes(user, other_user, stored_file):
    """Test that existing bytes block the upload with no record written."""
    with pytest.raises(FileConflictError):
        upload_file(other_user, ContentFile(b'other', name='report.txt'))

    assert File.objects.count() == 1
    assert download_file('report.txt') == b'hello world!'


@pytest.mark.django_db
def test_upload_file_conflict_with_orphaned_bytes(user, byte_store_dir):
    """Test that bytes without a record still block the upload."""
    byte_store_dir.mkdir(parents=True, exist_ok=True)
    (byte_store_dir / 'report.txt').write_bytes(b'orphan')

    with pytest.raises(FileConflictError):
        upload_file(user, ContentFile(b'new', name='report.txt'))

    assert not File.objects.exists()
    assert (byte_store_dir / 'report.txt').read_bytes() == b'orphan'


@pytest.mark.django_db
def test_upload_file_conflict_with_record_only(user, byte_store_dir):
    """Test that a record without bytes blocks the upload."""
    File.objects.create(
        owner=user,
        filename='report.txt',
        size_bytes=3,
        checksum='0',
    )

    with pytest.raises(FileConflictError):
        upload_file(user, ContentFile(b'new', name='report.txt'))

    assert not (byte_store_dir / 'report.txt').exists()


@pytest.mark.django_db
@pytest.mark.parametrize('filename', [
    '',
    'docs/report.txt',
    '..',
    'a' * 260 + '.txt',
])
def test_upload_file_invalid_filename(user, filename):
    """Test that blank, non-flat and overlong filenames are rejected."""
    with pytest.raises(InvalidArgumentError):
        upload_file(user, ContentFile(b'abc'), filename)

    assert not File.objects.exists()


@pytest.mark.django_db
def test_upload_file_rolls_back_bytes_on_db_failure(
    user,
    byte_store_dir,
    monkeypatch,
):
    """Test that bytes are deleted again when the insert fails."""

    def failing_create(**kwargs):
        raise DatabaseError('insert failed')

    monkeypatch.setattr(File.objects, 'create', failing_create)

    with pytest.raises(StorageFailureError):
        upload_file(user, ContentFile(b'abc', name='report.txt'))

    assert not (byte_store_dir / 'report.txt').exists()
    assert not File.objects.exists()


@pytest.mark.django_db
def test_upload_file_storage_failure(user, monkeypatch):
    """Test that a failing byte store write is reported."""

    def failing_save(name, content, max_length=None):
        raise OSError('disk full')

    monkeypatch.setattr(default_storage, 'save', failing_save)

    with pytest.raises(StorageFailureError):
        upload_file(user, ContentFile(b'abc', name='report.txt'))

    assert not File.objects.exists()


@pytest.mark.django_db
def test_download_file_not_found(user):
    """Test downloading a filename that was never stored."""
    with pytest.raises(FileNotFoundInStoreError):
        download_file('missing.txt')


@pytest.mark.django_db
def test_download_file_ignores_owner_by_default(other_user, stored_file):
    """Test that any caller can read a file by name."""
    assert download_file('report.txt') == b'hello world!'


@pytest.mark.django_db
def test_download_file_with_owner(user, other_user, stored_file):
    """Test ownership checks when an owner is passed."""
    assert download_file('report.txt', owner=user) == b'hello world!'

    with pytest.raises(FileForbiddenError):
        download_file('report.txt', owner=other_user)


@pytest.mark.django_db
def test_download_file_record_without_bytes(user, stored_file, byte_store_dir):
    """Test that missing bytes are reported as not found."""
    (byte_store_dir / 'report.txt').unlink()

    with pytest.raises(FileNotFoundInStoreError):
        download_file('report.txt', owner=user)


@pytest.mark.django_db
def test_rename_file_success(user, stored_file, byte_store_dir):
    """Test that rename moves bytes and updates the record."""
    before = download_file('report.txt')

    renamed = rename_file('report.txt', 'summary.txt', user)

    assert renamed.filename == 'summary.txt'
    assert renamed.id == stored_file.id
    assert download_file('summary.txt') == before
    assert not (byte_store_dir / 'report.txt').exists()
    with pytest.raises(FileNotFoundInStoreError):
        download_file('report.txt')


@pytest.mark.django_db
def test_rename_file_forbidden(user, other_user, stored_file, byte_store_dir):
    """Test that a non-owner cannot rename and nothing changes."""
    with pytest.raises(FileForbiddenError):
        rename_file('report.txt', 'x.txt', other_user)

    stored_file.refresh_from_db()
    assert stored_file.filename == 'report.txt'
    assert (byte_store_dir / 'report.txt').exists()
    assert not (byte_store_dir / 'x.txt').exists()


@pytest.mark.django_db
def test_rename_file_not_found(user):
    """Test renaming a filename without a record."""
    with pytest.raises(FileNotFoundInStoreError):
        rename_file('missing.txt', 'x.txt', user)


@pytest.mark.django_db
def test_rename_file_bytes_missing(user, stored_file, byte_store_dir):
    """Test renaming a record whose bytes are gone."""
    (byte_store_dir / 'report.txt').unlink()

    with pytest.raises(FileNotFoundInStoreError):
        rename_file('report.txt', 'x.txt', user)

    stored_file.refresh_from_db()
    assert stored_file.filename == 'report.txt'


@pytest.mark.django_db
def test_rename_file_conflict(user, other_user, stored_file, byte_store_dir):
    """Test that a name used by another record cannot be taken."""
    (byte_store_dir / 'taken.txt').write_bytes(b'taken')
    File.objects.create(
        owner=other_user,
        filename='taken.txt',
        size_bytes=5,
        checksum='0',
    )

    with pytest.raises(FileConflictError):
        rename_file('report.txt', 'taken.txt', user)

    assert (byte_store_dir / 'taken.txt').read_bytes() == b'taken'
    assert (byte_store_dir / 'report.txt').exists()


@pytest.mark.django_db
def test_rename_file_overwrites_orphaned_bytes(user, stored_file, byte_store_dir):
    """Test that bytes without a record do not block a rename."""
    (byte_store_dir / 'x.txt').write_bytes(b'orphan')

    rename_file('report.txt', 'x.txt', user)

    assert (byte_store_dir / 'x.txt').read_bytes() == b'hello world!'


@pytest.mark.django_db
def test_rename_file_same_name(user, stored_file):
    """Test that renaming to the current name changes nothing."""
    renamed = rename_file('report.txt', 'report.txt', user)

    assert renamed.filename == 'report.txt'
    assert download_file('report.txt') == b'hello world!'


@pytest.mark.django_db
@pytest.mark.parametrize('new_filename', [None, '', 'dir/x.txt'])
def test_rename_file_invalid_new_name(user, stored_file, new_filename):
    """Test that an invalid target name is rejected."""
    with pytest.raises(InvalidArgumentError):
        rename_file('report.txt', new_filename, user)


@pytest.mark.django_db
def test_rename_file_moves_bytes_back_on_db_failure(
    user,
    stored_file,
    byte_store_dir,
    monkeypatch,
):
    """Test that bytes return to the old name when the update fails."""

    def failing_save(self, *args, **kwargs):
        raise DatabaseError('update failed')

    monkeypatch.setattr(File, 'save', failing_save)

    with pytest.raises(StorageFailureError):
        rename_file('report.txt', 'x.txt', user)

    assert (byte_store_dir / 'report.txt').read_bytes() == b'hello world!'
    assert not (byte_store_dir / 'x.txt').exists()
    assert File.objects.get(id=stored_file.id).filename == 'report.txt'


@pytest.mark.django_db
def test_list_files(user, other_user):
    """Test listing in upload order, scoped to the owner."""
    upload_file(user, ContentFile(b'a', name='a.txt'))
    upload_file(other_user, ContentFile(b'bb', name='b.txt'))
    upload_file(user, ContentFile(b'ccc', name='c.txt'))

    assert list_files(user) == [FileInfo('a.txt', 1), FileInfo('c.txt', 3)]
    assert list_files(other_user) == [FileInfo('b.txt', 2)]


@pytest.mark.django_db
def test_list_files_limit(user):
    """Test that a positive limit caps the result."""
    for index in range(5):
        upload_file(user, ContentFile(b'x', name=f'{index}.txt'))

    assert len(list_files(user, limit=3)) == 3
    assert [info.filename for info in list_files(user, limit=2)] == [
        '0.txt',
        '1.txt',
    ]
    assert len(list_files(user, limit=0)) == 5
    assert len(list_files(user, limit=-1)) == 5


@pytest.mark.django_db
def test_list_files_empty(user):
    """Test listing for a user without files."""
    assert list_files(user) == []


@pytest.mark.django_db
def test_delete_file_success(user, stored_file, byte_store_dir):
    """Test successful file deletion (bytes + record)."""
    delete_file('report.txt', user)

    assert not File.objects.filter(id=stored_file.id).exists()
    assert not (byte_store_dir / 'report.txt').exists()
    with pytest.raises(FileNotFoundInStoreError):
        download_file('report.txt')
    with pytest.raises(FileNotFoundInStoreError):
        rename_file('report.txt', 'x.txt', user)


@pytest.mark.django_db
def test_delete_file_forbidden(other_user, stored_file, byte_store_dir):
    """Test that a non-owner cannot delete."""
    with pytest.raises(FileForbiddenError):
        delete_file('report.txt', other_user)

    assert File.objects.filter(id=stored_file.id).exists()
    assert (byte_store_dir / 'report.txt').exists()


@pytest.mark.django_db
def test_delete_file_not_found(user):
    """Test deleting non-existent file."""
    with pytest.raises(FileNotFoundInStoreError):
        delete_file('missing.txt', user)


@pytest.mark.django_db
def test_delete_file_storage_failure(
    user,
    stored_file,
    byte_store_dir,
    monkeypatch,
):
    """Test that bytes that cannot be removed keep the record too."""

    def failing_delete(name):
        raise PermissionError(name)

    monkeypatch.setattr(default_storage, 'delete', failing_delete)

    with pytest.raises(StorageFailureError):
        delete_file('report.txt', user)

    assert File.objects.filter(id=stored_file.id).exists()
    assert (byte_store_dir / 'report.txt').read_bytes() == b'hello world!'


@pytest.mark.django_db
def test_delete_file_bytes_missing(user, stored_file, byte_store_dir):
    """Test that a record without bytes is reported and kept."""
    (byte_store_dir / 'report.txt').unlink()

    with pytest.raises(FileNotFoundInStoreError):
        delete_file('report.txt', user)

    assert File.objects.filter(id=stored_file.id).exists()


@pytest.mark.django_db
def test_alice_and_bob_scenario(user, other_user):
    """Test a full lifecycle with a second user trying to interfere."""
    payload = b'hello world!'
    created = upload_file(user, ContentFile(payload, name='report.txt'))
    assert created.size_bytes == 12
    assert created.checksum == calculate_checksum(ContentFile(payload))

    with pytest.raises(FileForbiddenError):
        rename_file('report.txt', 'x.txt', other_user)

    rename_file('report.txt', 'x.txt', user)
    delete_file('x.txt', user)

    assert list_files(user) == []
