"""
Unit tests for domain events.
"""

import dataclasses

import pytest

from dropvault.domain.events import (
    FileDeletedEvent,
    FileDownloadedEvent,
    FileReapedEvent,
    FileUploadedEvent,
    ReapCompletedEvent,
)
from tests.fixtures.domain_fixtures import FIXED_NOW


def test_uploaded_event_serializes():
    event = FileUploadedEvent(
        aggregate_id="abc",
        occurred_at=FIXED_NOW,
        visibility="public",
        size_bytes=100,
        expires_at=FIXED_NOW,
    )

    assert event.to_dict() == {
        "event_type": "FileUploadedEvent",
        "aggregate_id": "abc",
        "occurred_at": FIXED_NOW.isoformat(),
        "visibility": "public",
        "size_bytes": 100,
        "expires_at": FIXED_NOW.isoformat(),
        "owner_id": None,
    }


def test_events_are_immutable():
    event = FileDownloadedEvent("abc", FIXED_NOW, download_count=1, max_downloads=3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.download_count = 2


@pytest.mark.parametrize(
    "event,keys",
    [
        (FileDeletedEvent("abc", FIXED_NOW, "u1", True), {"owner_id", "blob_existed"}),
        (FileReapedEvent("abc", FIXED_NOW, FIXED_NOW, False), {"expired_at", "blob_deleted"}),
        (
            ReapCompletedEvent("run", FIXED_NOW, 2, 1, 0, 1),
            {"scanned", "records_deleted", "blob_failures", "record_failures"},
        ),
    ],
)
def test_event_specific_fields_are_serialized(event, keys):
    data = event.to_dict()
    assert data["event_type"] == type(event).__name__
    assert keys <= set(data)
