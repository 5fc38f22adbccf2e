# Stockage local des fichiers uploadés - app/infra/storage.py
"""
Arborescence disque des documents :

    {UPLOAD_DIR}/{role}_{user_id}/document-{timestamp}-{random}{ext}

Le chemin relatif (depuis UPLOAD_DIR) est stocké en base dans
Document.chemin_fichier ; resolve_path() le retransforme en chemin absolu.
L'écriture disque précède l'insert en base : en cas d'échec côté base,
delete_files() sert d'action compensatoire.
"""
import logging
import os
import secrets
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    nom_fichier:    str   # nom généré sur disque
    chemin_fichier: str   # chemin relatif à UPLOAD_DIR
    taille:         int


def user_folder(role: str, user_id: int) -> str:
    """Clé de dossier en minuscules : "AMO", "amo" → amo_{id}."""
    return f"{role.lower()}_{user_id}"


def generate_filename(original_name: Optional[str]) -> str:
    extension = os.path.splitext(original_name or "")[1].lower()
    timestamp = int(time.time() * 1000)
    suffix = secrets.randbelow(10**9)
    return f"document-{timestamp}-{suffix}{extension}"


def save_file(
    content: bytes,
    original_name: Optional[str],
    role: str,
    user_id: int,
    base_dir: Optional[str] = None,
) -> StoredFile:
    base_dir = base_dir or settings.UPLOAD_DIR
    folder = user_folder(role, user_id)
    os.makedirs(os.path.join(base_dir, folder), exist_ok=True)

    filename = generate_filename(original_name)
    relative = f"{folder}/{filename}"
    with open(os.path.join(base_dir, folder, filename), "wb") as buffer:
        buffer.write(content)

    return StoredFile(nom_fichier=filename, chemin_fichier=relative, taille=len(content))


def resolve_path(relative: str, base_dir: Optional[str] = None) -> str:
    base = os.path.abspath(base_dir or settings.UPLOAD_DIR)
    path = os.path.abspath(os.path.join(base, relative))
    if os.path.commonpath([base, path]) != base:
        raise ValueError(f"Chemin hors du répertoire d'upload : {relative}")
    return path


def file_exists(relative: Optional[str], base_dir: Optional[str] = None) -> bool:
    if not relative:
        return False
    try:
        return os.path.isfile(resolve_path(relative, base_dir))
    except ValueError:
        return False


def delete_files(relatives: Iterable[str], base_dir: Optional[str] = None) -> None:
    """Suppression best-effort : un échec est journalisé, jamais propagé."""
    for relative in relatives:
        try:
            os.remove(resolve_path(relative, base_dir))
            logger.info("Fichier supprimé (compensation) : %s", relative)
        except (OSError, ValueError) as exc:
            logger.warning("Impossible de supprimer %s : %s", relative, exc)
