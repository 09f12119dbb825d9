"""Event entity -- the candidate record a relay asks us to admit.

Fields are stored exactly as decoded from JSON: nothing is coerced, so a
kind sent as a string stays a string and simply fails the allowlist.
Well-formedness is a separate predicate over the Event so a policy can
substitute its own.

Everything beyond the five fields the filter reads (content, tags, ...)
lands in ``extra`` and is never inspected.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

REQUIRED_FIELDS = ("id", "pubkey", "created_at", "sig")

_INSPECTED_FIELDS = frozenset(REQUIRED_FIELDS + ("kind",))


@dataclass(frozen=True, slots=True)
class Event:
    """A decoded event. Values are Any until is_well_formed() vouches for them."""
    id: Any = None
    pubkey: Any = None
    created_at: Any = None
    sig: Any = None
    kind: Any = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, obj: Mapping[str, Any]) -> Event:
        """Build an Event from a decoded JSON object. Missing fields become None."""
        return cls(
            id=obj.get("id"),
            pubkey=obj.get("pubkey"),
            created_at=obj.get("created_at"),
            sig=obj.get("sig"),
            kind=obj.get("kind"),
            extra=MappingProxyType(
                {k: v for k, v in obj.items() if k not in _INSPECTED_FIELDS}
            ),
        )

    @property
    def short_pubkey(self) -> str:
        """First 8 characters of the author key, for log lines."""
        if isinstance(self.pubkey, str):
            return self.pubkey[:8]
        return "?"


def _is_present(name: str, value: Any) -> bool:
    if name == "created_at":
        # bool is an int subclass; a zero timestamp counts as missing
        return isinstance(value, int) and not isinstance(value, bool) and value != 0
    return isinstance(value, str) and value != ""


def missing_fields(event: Event) -> tuple[str, ...]:
    """Names of required fields that are absent or empty, in declaration order."""
    return tuple(
        name for name in REQUIRED_FIELDS
        if not _is_present(name, getattr(event, name))
    )


def is_well_formed(event: Event) -> bool:
    """Default structural check: id, pubkey, created_at and sig all present."""
    return not missing_fields(event)
