"""Utilities for creating Prometheus collectors that survive re-imports."""

from __future__ import annotations

from typing import Sequence

from prometheus_client import REGISTRY, Counter

from core.logging import get_logger

logger = get_logger(__name__)


def _lookup_collector(name: str):
    existing = getattr(REGISTRY, "_names_to_collectors", None)
    if isinstance(existing, dict):
        return existing.get(name)
    return None


def build_counter(name: str, documentation: str, labelnames: Sequence[str] | None = None):
    """Create a Counter while tolerating duplicate registrations."""

    labels = tuple(labelnames or ())
    try:
        return Counter(name, documentation, labels)
    except ValueError:
        # prometheus_client registers counters under the base name without "_total".
        base_name = name[: -len("_total")] if name.endswith("_total") else name
        collector = _lookup_collector(name) or _lookup_collector(base_name)
        if collector is None:
            logger.debug("Counter %s already registered but not found in registry.", name)
        return collector


__all__ = ["build_counter"]
