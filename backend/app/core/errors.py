# backend/app/core/errors.py
"""
Gestionnaires d'erreurs centralisés.

    400 → erreurs de validation (pydantic ou règles métier), format unique :
          {"detail": "Erreurs de validation", "errors": [{"field", "message"}]}
    404 → route inconnue
    500 → dernier recours ; le message de l'exception n'est renvoyé qu'en DEBUG
"""
import logging
from typing import Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exception_handlers import http_exception_handler

from app.core.config import settings

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Erreurs de validation"


class ValidationFailed(Exception):
    """Erreur de validation métier levée par les services."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(VALIDATION_MESSAGE)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}])


def format_pydantic_errors(raw_errors) -> List[Dict[str, str]]:
    errors = []
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        message = err.get("msg", "Valeur invalide")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})
    return errors


def _validation_response(errors: List[Dict[str, str]]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": VALIDATION_MESSAGE, "errors": errors},
    )


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    logger.info("Validation refusée sur %s : %s", request.url.path, exc.errors)
    return _validation_response(exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_pydantic_errors(exc.errors())
    logger.info("Requête invalide sur %s : %s", request.url.path, errors)
    return _validation_response(errors)


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"detail": "Route non trouvée"})
    return await http_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Erreur non gérée sur %s %s", request.method, request.url.path)
    content = {"detail": "Erreur interne du serveur"}
    if settings.DEBUG:
        content["error"] = str(exc)
        content["type"] = type(exc).__name__
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
