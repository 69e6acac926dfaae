"""
Route protection policy.

Every route belongs to one tier. Tiers are checked as an ordered funnel and
the first unmet requirement decides the redirect:

    authenticated -> onboarding complete -> RSVP -> upload

The onboarding wizard is the one inverse gate: it needs a session but sends
users who already finished onboarding on to the event page.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from quincy.core.errors import ProgressNotResolved
from quincy.services.progress import ProgressModel, ProgressSnapshot, ProgressState


class RouteTier(str, Enum):
    public = "public"
    auth_only = "auth-only"
    onboarded = "onboarded"
    rsvp_gated = "rsvp-gated"
    upload_gated = "upload-gated"


class RedirectTarget(str, Enum):
    auth = "/auth"
    onboarding = "/onboarding"
    event = "/event"
    records = "/records"


class Decision(BaseModel):
    allow: bool
    redirect_to: Optional[RedirectTarget] = None
    resume_path: Optional[str] = None  # where to continue after signing in

    class Config:
        frozen = True


ROUTE_TIERS = {
    "/": RouteTier.public,
    "/home": RouteTier.public,
    "/auth": RouteTier.public,
    "/event": RouteTier.public,
    "/login": RouteTier.public,
    "/signup": RouteTier.public,

    "/onboarding": RouteTier.auth_only,

    "/me": RouteTier.onboarded,
    "/music-preferences": RouteTier.onboarded,

    # the upload page itself cannot require an upload
    "/records": RouteTier.rsvp_gated,
    "/records/:id": RouteTier.rsvp_gated,

    "/people": RouteTier.upload_gated,
    "/people/:id": RouteTier.upload_gated,
    "/discover": RouteTier.upload_gated,
    "/matches": RouteTier.upload_gated,
    "/chat/:id": RouteTier.upload_gated,
}

DEFAULT_TIER = RouteTier.upload_gated

_TIER_RANK = {
    RouteTier.public: 0,
    RouteTier.auth_only: 1,
    RouteTier.onboarded: 2,
    RouteTier.rsvp_gated: 3,
    RouteTier.upload_gated: 4,
}


def normalize_path(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _matches(pattern: str, path: str) -> bool:
    pattern_parts = pattern.strip("/").split("/")
    path_parts = path.strip("/").split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    for expected, actual in zip(pattern_parts, path_parts):
        if expected.startswith(":"):
            if not actual:
                return False
        elif expected != actual:
            return False
    return True


def classify(path: str, routes: dict = ROUTE_TIERS) -> RouteTier:
    path = normalize_path(path)
    if path in routes:
        return routes[path]
    for pattern, tier in routes.items():
        if ":" in pattern and _matches(pattern, path):
            return tier
    return DEFAULT_TIER


def resolve_destination(progress: ProgressModel, requested_path: str,
                        routes: dict = ROUTE_TIERS) -> Decision:
    tier = classify(requested_path, routes)
    rank = _TIER_RANK[tier]

    if tier is RouteTier.public:
        return Decision(allow=True)

    if not progress.authenticated:
        return Decision(
            allow=False,
            redirect_to=RedirectTarget.auth,
            resume_path=normalize_path(requested_path),
        )

    if tier is RouteTier.auth_only:
        if progress.onboarding_complete:
            return Decision(allow=False, redirect_to=RedirectTarget.event)
        return Decision(allow=True)

    if rank >= _TIER_RANK[RouteTier.onboarded] and not progress.onboarding_complete:
        return Decision(allow=False, redirect_to=RedirectTarget.onboarding)

    if rank >= _TIER_RANK[RouteTier.rsvp_gated] and not progress.has_rsvp:
        return Decision(allow=False, redirect_to=RedirectTarget.event)

    if rank >= _TIER_RANK[RouteTier.upload_gated] and not progress.has_uploaded:
        return Decision(allow=False, redirect_to=RedirectTarget.records)

    return Decision(allow=True)


def gate_snapshot(snapshot: ProgressSnapshot, requested_path: str) -> Decision:
    if snapshot.state is ProgressState.loading:
        raise ProgressNotResolved("Progress is still loading; wait for it to resolve before gating")
    progress = snapshot.progress if snapshot.state is ProgressState.resolved else ProgressModel.anonymous()
    return resolve_destination(progress, requested_path)
