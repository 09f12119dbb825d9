"""Shared fixtures for plugin tests.

Provides wire-format builders and a helper that runs the PluginLoop
over in-memory streams.
"""
from __future__ import annotations

import io
import json

import pytest

from discovery_filter.plugin.evaluator import AdmissionPolicy
from discovery_filter.plugin.loop import LoopStats, PluginLoop


def event_obj(**overrides) -> dict:
    obj = {
        "id": "abc",
        "pubkey": "def",
        "created_at": 100,
        "sig": "xyz",
        "kind": 3,
    }
    obj.update(overrides)
    return obj


def request_line(event, **envelope) -> bytes:
    """One wire request line for the given event (dict or pre-encoded string)."""
    obj = {"type": "new", "event": event}
    obj.update(envelope)
    return json.dumps(obj).encode("utf-8") + b"\n"


def run_lines(lines: list[bytes], evaluator=None) -> tuple[list[dict], LoopStats]:
    """Feed lines through a PluginLoop; return decoded verdicts and stats."""
    out = io.BytesIO()
    loop = PluginLoop(io.BytesIO(b"".join(lines)), out, evaluator or AdmissionPolicy())
    stats = loop.run()
    verdicts = [json.loads(raw) for raw in out.getvalue().splitlines()]
    return verdicts, stats


@pytest.fixture()
def policy() -> AdmissionPolicy:
    return AdmissionPolicy()
