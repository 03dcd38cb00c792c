"""Prometheus counters for shareable link activity."""

from __future__ import annotations

from services.prometheus_helpers import build_counter

_LINKS_CREATED = build_counter(
    "share_links_created_total",
    "Shareable links created, grouped by visibility.",
    ("visibility",),
)
_RESOLUTIONS = build_counter(
    "share_link_resolutions_total",
    "Shareable link resolution attempts grouped by access decision.",
    ("decision",),
)
_INVITATIONS = build_counter(
    "share_invitations_enqueued_total",
    "Invitation jobs handed to the queue grouped by outcome.",
    ("result",),
)


def record_link_created(public: bool) -> None:
    if _LINKS_CREATED is None:
        return
    _LINKS_CREATED.labels(visibility="public" if public else "private").inc()


def record_resolution(decision: str) -> None:
    if _RESOLUTIONS is None:
        return
    _RESOLUTIONS.labels(decision=decision).inc()


def record_invitation(success: bool) -> None:
    if _INVITATIONS is None:
        return
    _INVITATIONS.labels(result="queued" if success else "failed").inc()


__all__ = ["record_invitation", "record_link_created", "record_resolution"]
