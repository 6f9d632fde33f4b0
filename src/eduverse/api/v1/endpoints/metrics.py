"""Request metrics and process health endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from eduverse.schemas.common import StatusMessage

from ..dependencies import AdminDep, CurrentUserDep, MetricsSinkDep

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("")
async def read_metrics(_: CurrentUserDep, sink: MetricsSinkDep) -> dict[str, Any]:
    """Summary of recently handled requests."""
    return sink.summary()


@router.delete("", response_model=StatusMessage)
async def clear_metrics(_: AdminDep, sink: MetricsSinkDep) -> StatusMessage:
    """Discard all buffered request metrics."""
    sink.clear()
    return StatusMessage(message="Metrics cleared")


@router.get("/health")
async def metrics_health(sink: MetricsSinkDep) -> dict[str, Any]:
    """Coarse health flag based on process memory."""
    return sink.health()
