"""Tests for the AdmissionPolicy.

Covers: allowed kinds, disallowed kinds, malformed events, precedence
of the structural check, determinism, and swapping either collaborator.
"""
from __future__ import annotations

import logging

import pytest

from discovery_filter.domain.decisions import Action, Verdict
from discovery_filter.domain.event import Event
from discovery_filter.domain.policy import KindAllowlist
from discovery_filter.plugin.evaluator import AdmissionPolicy

from tests.plugin.conftest import event_obj


def _event(**overrides) -> Event:
    return Event.from_mapping(event_obj(**overrides))


@pytest.mark.parametrize("kind", [3, 10002])
def test_allowed_kind_accepted(policy, kind):
    assert policy.evaluate(_event(kind=kind)) == Verdict.accept()


@pytest.mark.parametrize("kind", [0, 1, 4, 7, 10000, 30023])
def test_disallowed_kind_rejected(policy, kind):
    verdict = policy.evaluate(_event(kind=kind))
    assert verdict.action is Action.REJECT
    assert verdict.msg == f"Event kind {kind} not allowed for discovery relay sync"


def test_missing_kind_rejected(policy):
    obj = event_obj()
    del obj["kind"]
    verdict = policy.evaluate(Event.from_mapping(obj))
    assert verdict.action is Action.REJECT
    assert "None" in verdict.msg


def test_string_kind_not_coerced(policy):
    assert policy.evaluate(_event(kind="3")).action is Action.REJECT


@pytest.mark.parametrize("name", ["id", "pubkey", "created_at", "sig"])
@pytest.mark.parametrize("kind", [3, 1])
def test_missing_field_rejected_regardless_of_kind(policy, name, kind):
    obj = event_obj(kind=kind)
    del obj[name]
    verdict = policy.evaluate(Event.from_mapping(obj))
    assert verdict == Verdict.reject("Event missing required fields")


def test_zero_timestamp_is_malformed(policy):
    verdict = policy.evaluate(_event(created_at=0))
    assert verdict.msg == "Event missing required fields"


def test_extra_fields_ignored(policy):
    event = _event(tags=[["p", "abc"]], content="x" * 10_000, weird={"a": 1})
    assert policy.evaluate(event).is_accepted()


def test_idempotent(policy):
    for event in (_event(), _event(kind=1), _event(id="")):
        assert policy.evaluate(event) == policy.evaluate(event)


def test_custom_allowlist():
    policy = AdmissionPolicy(allowlist=KindAllowlist.of(1))
    assert policy.evaluate(_event(kind=1)).is_accepted()
    assert not policy.evaluate(_event(kind=3)).is_accepted()


def test_custom_well_formed_predicate():
    policy = AdmissionPolicy(well_formed=lambda event: event.id == "trusted")
    assert policy.evaluate(_event(id="trusted", sig="")).is_accepted()
    verdict = policy.evaluate(_event(id="abc"))
    assert verdict.msg == "Event missing required fields"


def test_default_allowlist_exposed(policy):
    assert policy.allowlist.kinds == (3, 10002)


def test_accept_logged_with_label_and_short_pubkey(caplog):
    policy = AdmissionPolicy()
    with caplog.at_level(logging.INFO, logger="discovery_filter"):
        policy.evaluate(_event(kind=10002, pubkey="0123456789abcdef"))
    assert "Accepting relay list event from 01234567..." in caplog.text


def test_reject_logged(caplog):
    policy = AdmissionPolicy()
    with caplog.at_level(logging.INFO, logger="discovery_filter"):
        policy.evaluate(_event(kind=1))
        policy.evaluate(_event(sig=""))
    assert "Rejecting event kind 1 (not in allowed kinds: 3, 10002)" in caplog.text
    assert "missing required fields sig" in caplog.text
