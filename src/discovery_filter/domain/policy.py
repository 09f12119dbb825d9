"""Kind allowlist -- the process-wide admission configuration.

A discovery relay only syncs the events needed to find people and their
relays: contact lists (kind 3) and relay lists (kind 10002). The labels
are used for log lines only.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from discovery_filter.domain.types import Kind


@dataclass(frozen=True, slots=True)
class KindAllowlist:
    """Immutable set of allowed kinds, each with a descriptive label."""
    labels: Mapping[Kind, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for kind in self.labels:
            if not isinstance(kind, int) or isinstance(kind, bool) or kind < 0:
                raise ValueError(f"Kinds must be non-negative integers, got {kind!r}")
        # freeze a private copy so callers can't mutate the table later
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    @classmethod
    def of(cls, *kinds: Kind) -> KindAllowlist:
        """Factory: allowlist without labels."""
        return cls({k: f"kind {k}" for k in kinds})

    def __contains__(self, kind: Any) -> bool:
        # JSON true must not pass as kind 1
        if isinstance(kind, bool):
            return False
        try:
            return kind in self.labels
        except TypeError:  # unhashable kind, e.g. a list
            return False

    def __iter__(self) -> Iterator[Kind]:
        return iter(self.kinds)

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def kinds(self) -> tuple[Kind, ...]:
        return tuple(sorted(self.labels))

    def describe(self, kind: Any) -> str:
        """Label for a kind, or "kind N" when it has none."""
        if kind in self:
            return self.labels[kind]
        return f"kind {kind}"


DISCOVERY_RELAY_KINDS = KindAllowlist({
    3: "contact list",
    10002: "relay list",
})
