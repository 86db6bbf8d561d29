from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Does not touch the signup store, so it stays green while the managed
    backend is unreachable.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
