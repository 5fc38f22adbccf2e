# app/shared/sanitize.py
"""
Nettoyage des entrées utilisateur, appliqué avant toute logique métier.

Chaque chaîne (à n'importe quelle profondeur de dict / list) est :
    1. trimée
    2. analysée par BeautifulSoup (lxml) : <script>/<style> supprimés avec leur
       contenu, même non fermés ; seul le texte des autres éléments est gardé
    3. échappée HTML (& < > " ')
Les autres valeurs (nombres, booléens, None) passent telles quelles.

Trois points d'application :
    - SanitizeMiddleware : corps JSON / urlencoded + query string
    - sanitize_path_params : dépendance globale, paramètres de chemin
    - les corps multipart (fichiers) ne sont pas touchés ; leurs champs texte
      sont des enums validés par les schemas

Fail-open : une erreur interne est journalisée et la requête continue
non modifiée. La validation pydantic reste la vraie barrière.
"""
import html
import json
import logging
import warnings
from typing import Any
from urllib.parse import parse_qsl, urlencode

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from fastapi import Request

logger = logging.getLogger(__name__)

# "plan.pdf", "https://..." sont des valeurs normales, pas des chemins à ouvrir
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

STRIPPED_ELEMENTS = ["script", "style"]

SANITIZED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


def sanitize_string(value: str) -> str:
    soup = BeautifulSoup(value.strip(), "lxml")
    for element in soup(STRIPPED_ELEMENTS):
        element.decompose()
    return html.escape(soup.get_text().strip(), quote=True)


def sanitize_data(data: Any) -> Any:
    if isinstance(data, str):
        return sanitize_string(data)
    if isinstance(data, list):
        return [sanitize_data(item) for item in data]
    if isinstance(data, dict):
        return {key: sanitize_data(value) for key, value in data.items()}
    return data


def sanitize_email(email: str) -> str:
    return email.strip().lower()


def _sanitize_query_string(raw: bytes) -> bytes:
    if not raw:
        return raw
    pairs = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
    return urlencode([(key, sanitize_string(value)) for key, value in pairs]).encode("latin-1")


def _sanitize_body(body: bytes, content_type: str) -> bytes:
    if not body:
        return body
    if content_type.startswith("application/json"):
        return json.dumps(sanitize_data(json.loads(body))).encode("utf-8")
    pairs = parse_qsl(body.decode("utf-8"), keep_blank_values=True)
    return urlencode([(key, sanitize_string(value)) for key, value in pairs]).encode("utf-8")


class SanitizeMiddleware:
    """Middleware ASGI : réécrit query string et corps avant le routage."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            scope["query_string"] = _sanitize_query_string(scope.get("query_string", b""))
        except Exception:
            logger.exception("Sanitisation de la query string impossible : requête non modifiée")

        headers = dict(scope.get("headers") or [])
        content_type = headers.get(b"content-type", b"").decode("latin-1").lower()
        if not content_type.startswith(SANITIZED_CONTENT_TYPES):
            await self.app(scope, receive, send)
            return

        # ── Lecture complète du corps ─────────────────────────
        chunks = []
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        body = b"".join(chunks)

        try:
            body = _sanitize_body(body, content_type)
        except Exception:
            logger.exception("Sanitisation du corps impossible : requête non modifiée")

        scope["headers"] = [
            (k, v) for k, v in scope.get("headers", []) if k != b"content-length"
        ] + [(b"content-length", str(len(body)).encode("latin-1"))]

        sent = False

        async def replay():
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


async def sanitize_path_params(request: Request) -> None:
    """Dépendance globale : nettoie les paramètres de chemin avant leur lecture."""
    try:
        params = request.scope.get("path_params") or {}
        request.scope["path_params"] = {
            key: sanitize_string(value) if isinstance(value, str) else value
            for key, value in params.items()
        }
    except Exception:
        logger.exception("Sanitisation des paramètres de chemin impossible")
