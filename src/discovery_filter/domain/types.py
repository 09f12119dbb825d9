"""Shared type aliases used across the domain."""
from __future__ import annotations

from typing import TypeAlias

Kind: TypeAlias = int
