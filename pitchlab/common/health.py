"""Liveness and readiness probes."""
from fastapi import APIRouter, Request
from pydantic import BaseModel

from pitchlab import __version__

router = APIRouter(tags=["system"])


class HealthStatus(BaseModel):
    status: str
    version: str = __version__
    active_sessions: int = 0
    sweeping: bool = False


@router.get("/health", response_model=HealthStatus)
def health_check(request: Request):
    registry = request.app.state.registry
    return HealthStatus(status="ok", active_sessions=len(registry), sweeping=registry.sweeping)


@router.get("/ready", response_model=HealthStatus)
def readiness_check(request: Request):
    registry = request.app.state.registry
    status = "ok" if registry.sweeping else "starting"
    return HealthStatus(status=status, active_sessions=len(registry), sweeping=registry.sweeping)
