from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from logistics.health.service import health_integrations_info
from logistics.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/integrations")
def health_integrations():
    return JSONResponse(health_integrations_info())

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
