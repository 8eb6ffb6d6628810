"""Utilities for deterministic pair keys and conflict identifiers."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True, slots=True)
class PairKey:
    """Canonical unordered pair of activity ids.

    ``first`` <= ``second`` always holds, so (a, b) and (b, a) share one key.
    """

    first: str
    second: str

    @classmethod
    def of(cls, a: str, b: str) -> PairKey:
        return cls(a, b) if a <= b else cls(b, a)

    def __str__(self) -> str:
        return f"{self.first}|{self.second}"


def stable_group_digest(activity_ids: Iterable[str], namespace: str) -> str:
    """Return a stable hex digest for a group of activity ids.

    The digest depends only on the set of ids and the namespace, never on
    wall-clock time, so repeated detection produces identical identifiers.
    """
    if not namespace:
        raise ValueError("namespace must be non-empty")

    payload = (namespace + ":" + ",".join(sorted(set(activity_ids)))).encode("utf-8")
    return hashlib.blake2b(payload, digest_size=8).hexdigest()


def time_overlap_conflict_id(pair: PairKey) -> str:
    return f"time_overlap:{pair}"


def market_conflict_id(protected_activity_id: str) -> str:
    return f"market_conflict:{protected_activity_id}"


def energy_overload_conflict_id(activity_ids: Iterable[str]) -> str:
    return f"energy_overload:{stable_group_digest(activity_ids, 'energy_overload')}"
