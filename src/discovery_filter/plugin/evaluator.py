"""Admission policy: given an event, produce an accept/reject verdict.

The decision logic:
  1. Structural check -- a malformed event is rejected whatever its kind
  2. Kind check -- only kinds in the allowlist pass
  3. Otherwise accept

Both checks are constructor arguments, so a test or a different relay
can swap the allowlist or the well-formedness predicate independently.

AdmissionPolicy has no mutable state. evaluate() is a pure function of
the event and the configuration; the log lines it emits never feed back
into the verdict.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from discovery_filter.domain.decisions import Verdict
from discovery_filter.domain.event import Event, is_well_formed, missing_fields
from discovery_filter.domain.policy import DISCOVERY_RELAY_KINDS, KindAllowlist

log = logging.getLogger(__name__)

MISSING_FIELDS_REASON = "Event missing required fields"


class Evaluator(Protocol):
    """Anything the plugin loop can ask for a verdict."""

    def evaluate(self, event: Event) -> Verdict: ...


class AdmissionPolicy:
    """Stateless kind-allowlist policy.

    Usage:
        policy = AdmissionPolicy()
        verdict = policy.evaluate(event)
    """

    def __init__(
        self,
        allowlist: KindAllowlist = DISCOVERY_RELAY_KINDS,
        well_formed: Callable[[Event], bool] = is_well_formed,
    ) -> None:
        self._allowlist = allowlist
        self._well_formed = well_formed

    @property
    def allowlist(self) -> KindAllowlist:
        return self._allowlist

    def evaluate(self, event: Event) -> Verdict:
        """Evaluate one event.

        Algorithm:
        1. If not well_formed(event) -> reject "Event missing required fields"
        2. If event.kind not in allowlist -> reject naming the kind
        3. accept
        """
        if not self._well_formed(event):
            log.warning(
                "Rejecting malformed event: missing required fields %s",
                ", ".join(missing_fields(event)) or "(custom check)",
            )
            return Verdict.reject(MISSING_FIELDS_REASON)

        if event.kind not in self._allowlist:
            log.warning(
                "Rejecting event kind %s (not in allowed kinds: %s)",
                event.kind,
                ", ".join(str(k) for k in self._allowlist.kinds),
            )
            return Verdict.reject(
                f"Event kind {event.kind} not allowed for discovery relay sync"
            )

        log.info(
            "Accepting %s event from %s...",
            self._allowlist.describe(event.kind),
            event.short_pubkey,
        )
        return Verdict.accept()
