"""Shared fixtures for domain tests."""
from __future__ import annotations

import pytest

from discovery_filter.domain.event import Event

DROP = object()  # pass as a field value to remove the field entirely


def make_event(**overrides) -> Event:
    """A well-formed kind-3 event, with any field overridden."""
    obj = {
        "id": "abc",
        "pubkey": "def0123456789",
        "created_at": 100,
        "sig": "xyz",
        "kind": 3,
        "tags": [],
        "content": "",
    }
    obj.update(overrides)
    return Event.from_mapping({k: v for k, v in obj.items() if v is not DROP})


@pytest.fixture()
def contact_list_event() -> Event:
    return make_event()
