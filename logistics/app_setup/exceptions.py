"""
Gestionnaires d’exceptions (utilisés par la factory).
- Erreurs métier (logistics.errors) -> JSON {"detail", "code"} avec un statut HTTP stable.
- HTTPException -> JSON FastAPI standard.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from logistics.errors import (
    LogisticsError,
    InvalidArgument,
    PaymentProviderError,
    ConfirmationUnavailable,
    LedgerInconsistency,
    NotFound,
    NoCheckoutInProgress,
)

logger = logging.getLogger(__name__)

def status_for(exc: LogisticsError) -> tuple[int, str]:
    """Retourne (statut HTTP, message utilisateur) pour une erreur métier."""
    if isinstance(exc, InvalidArgument):
        return 400, str(exc) or "Requête invalide"
    if isinstance(exc, NoCheckoutInProgress):
        return 409, "Paiement non encore confirmé"
    if isinstance(exc, NotFound):
        return 404, str(exc) or "Ressource introuvable"
    if isinstance(exc, ConfirmationUnavailable):
        return 502, "Paiement non encore confirmé, réessayez plus tard"
    if isinstance(exc, PaymentProviderError):
        return 502, "Impossible de démarrer le paiement, réessayez"
    if isinstance(exc, LedgerInconsistency):
        return 500, "Registre des paiements indisponible, réessayez"
    return 500, "Erreur interne"

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LogisticsError)
    async def logistics_error_handler(request: Request, exc: LogisticsError):
        status, detail = status_for(exc)
        if status >= 500:
            logger.error("%s %s -> %s (%s): %s", request.method, request.url.path, status, exc.code, exc)
        return JSONResponse(status_code=status, content={"detail": detail, "code": exc.code})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
