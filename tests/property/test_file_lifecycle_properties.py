"""
Property-based tests for the file lifecycle.

Verifies properties that must hold for every upload input: identifier
uniqueness, safe blob naming, size limits and download accounting.
"""

from hypothesis import given
from hypothesis import strategies as st

from dropvault.domain.errors import DownloadLimitExceededError, PayloadTooLargeError
from dropvault.domain.file_lifecycle.services import FileLifecycleEngine
from dropvault.domain.file_lifecycle.upload_source import BytesUpload
from dropvault.domain.file_lifecycle.value_objects import (
    UNKNOWN_FILENAME,
    extension_of,
    normalize_filename,
)
from tests.fixtures.domain_fixtures import FakeClock, create_policy_table
from tests.fixtures.mock_repositories import MockBlobStore, MockFileRecordRepository
from tests.property.strategies import any_filenames, hostile_filenames, owners, upload_sizes

SMALL_LIMIT = 64


def _engine(max_downloads: int = 3) -> FileLifecycleEngine:
    return FileLifecycleEngine(
        MockFileRecordRepository(),
        MockBlobStore(),
        create_policy_table(public_max_size=SMALL_LIMIT, public_max_downloads=max_downloads),
        clock=FakeClock(),
    )


@given(filename=any_filenames())
def test_extension_never_contains_path_components(filename):
    extension = extension_of(filename)

    assert "/" not in extension
    assert "\\" not in extension
    assert ".." not in extension
    assert "\x00" not in extension
    assert extension == "" or (extension.startswith(".") and len(extension) > 1)


@given(filename=any_filenames())
def test_normalized_filename_is_never_blank(filename):
    name = normalize_filename(filename)

    assert name.strip()
    if filename is not None and filename.strip():
        assert name == filename
    else:
        assert name == UNKNOWN_FILENAME


@given(filenames=st.lists(any_filenames(), min_size=1, max_size=20))
def test_every_upload_gets_a_distinct_id(filenames):
    engine = _engine()

    ids = [engine.upload_public(BytesUpload(b"x", name)).file_id for name in filenames]

    assert len(set(ids)) == len(ids)


@given(filename=hostile_filenames())
def test_stored_blob_name_is_id_plus_safe_extension(filename):
    engine = _engine()

    record = engine.upload_public(BytesUpload(b"x", filename))

    stored = engine.blob_store.names()
    assert stored == [record.file_id + extension_of(filename)]
    assert record.original_name == normalize_filename(filename)


@given(size=upload_sizes(SMALL_LIMIT))
def test_size_limit_is_inclusive(size):
    engine = _engine()

    try:
        record = engine.upload_public(BytesUpload(b"a" * size, "a.bin"))
    except PayloadTooLargeError:
        assert size > SMALL_LIMIT
        assert engine.metadata_repo.count() == 0
    else:
        assert size <= SMALL_LIMIT
        assert record.size_bytes == size


@given(max_downloads=st.integers(min_value=1, max_value=10), attempts=st.integers(min_value=0, max_value=15))
def test_download_count_never_exceeds_limit(max_downloads, attempts):
    engine = _engine(max_downloads)
    file_id = engine.upload_public(BytesUpload(b"x", "a.txt")).file_id

    accepted = 0
    for _ in range(attempts):
        try:
            engine.download(file_id).close()
            accepted += 1
        except DownloadLimitExceededError:
            pass

    assert accepted == min(attempts, max_downloads)
    assert engine.metadata_repo.find_by_id(file_id).download_count == accepted


@given(owner=owners(), other=owners())
def test_private_files_only_reach_their_owner(owner, other):
    engine = _engine()
    record = engine.upload_for_user(BytesUpload(b"x", "a.txt"), owner)

    assert record.can_be_downloaded_by(owner)
    assert record.can_be_downloaded_by(other) == (other.user_id == owner.user_id)
    assert not record.can_be_downloaded_by(None)
