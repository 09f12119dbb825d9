"""Domain model for discovery-filter.

Re-exports all public types for convenient access:
    from discovery_filter.domain import Event, Verdict, KindAllowlist
"""
from discovery_filter.domain.decisions import Action, Verdict
from discovery_filter.domain.event import (
    REQUIRED_FIELDS,
    Event,
    is_well_formed,
    missing_fields,
)
from discovery_filter.domain.policy import DISCOVERY_RELAY_KINDS, KindAllowlist
from discovery_filter.domain.types import Kind

__all__ = [
    "Action",
    "Verdict",
    "REQUIRED_FIELDS",
    "Event",
    "is_well_formed",
    "missing_fields",
    "DISCOVERY_RELAY_KINDS",
    "KindAllowlist",
    "Kind",
]
