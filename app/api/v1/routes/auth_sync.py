from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from api.dependencies.rate_limits import (
    SYNC_STATUS_LIMIT,
    SYNC_TRIGGER_LIMIT,
    get_limiter,
)
from infrastructure.logging import get_module_logger
from infrastructure.services import (
    AuthSyncMetricsDep,
    CircuitBreakerRegistryDep,
    SyncOrchestratorDep,
)
from modules.auth_sync.errors import NoRemoteConfiguredError, SyncInProgressError
from modules.auth_sync.metrics import METRICS_CONTENT_TYPE

logger = get_module_logger()

router = APIRouter(prefix="/auth-sync", tags=["Auth Sync"])
limiter = get_limiter()


class AuthSyncRequest(BaseModel):
    skip_oauth_configured: Optional[bool] = None
    global_timeout_seconds: Optional[float] = Field(default=None, gt=0, le=3600)
    providers: Optional[List[str]] = None


class CircuitResetRequest(BaseModel):
    provider: Optional[str] = None


@router.post("")
@limiter.limit(SYNC_TRIGGER_LIMIT)
async def trigger_auth_sync(
    request: Request,
    orchestrator: SyncOrchestratorDep,
    sync_request: Optional[AuthSyncRequest] = None,
):
    """
    Run one credential sync pass and return its report.

    Returns 409 when a pass is already running and 503 when no remote
    service is configured.
    """
    sync_request = sync_request or AuthSyncRequest()
    try:
        report = await orchestrator.sync(
            skip_oauth_configured=sync_request.skip_oauth_configured,
            global_timeout=sync_request.global_timeout_seconds,
            providers=sync_request.providers,
            trigger="api",
        )
    except SyncInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except NoRemoteConfiguredError as e:
        logger.warning("auth_sync_no_remote")
        raise HTTPException(status_code=503, detail=str(e)) from e
    return report.to_dict()


@router.post("/cancel")
@limiter.limit(SYNC_TRIGGER_LIMIT)
async def cancel_auth_sync(request: Request, orchestrator: SyncOrchestratorDep):
    """Signal the running pass, if any, to stop at the next boundary."""
    return {"cancelled": orchestrator.cancel()}


@router.get("/status")
@limiter.limit(SYNC_STATUS_LIMIT)
def get_auth_sync_status(
    request: Request,
    orchestrator: SyncOrchestratorDep,
    metrics: AuthSyncMetricsDep,
    breakers: CircuitBreakerRegistryDep,
):
    """Current in-progress flag, sync metrics and per-provider circuit state."""
    return {
        "in_progress": orchestrator.is_in_progress,
        "remote_configured": orchestrator.client is not None,
        "metrics": metrics.snapshot(),
        "circuits": breakers.get_all_stats(),
    }


@router.get("/metrics", include_in_schema=False)
@limiter.limit(SYNC_STATUS_LIMIT)
def export_auth_sync_metrics(request: Request, metrics: AuthSyncMetricsDep):
    """Sync metrics in the Prometheus text format."""
    return Response(content=metrics.render(), media_type=METRICS_CONTENT_TYPE)


@router.post("/circuits/reset")
@limiter.limit(SYNC_TRIGGER_LIMIT)
def reset_circuits(
    request: Request,
    breakers: CircuitBreakerRegistryDep,
    reset_request: Optional[CircuitResetRequest] = None,
):
    """Reset one provider's circuit breaker, or all of them."""
    provider = reset_request.provider if reset_request else None
    if provider is None:
        breakers.reset_all()
        logger.info("auth_sync_circuits_reset", scope="all")
        return {"reset": breakers.names()}

    if not breakers.reset(provider):
        raise HTTPException(
            status_code=404, detail=f"No circuit breaker for provider '{provider}'"
        )
    logger.info("auth_sync_circuits_reset", scope=provider)
    return {"reset": [provider]}
