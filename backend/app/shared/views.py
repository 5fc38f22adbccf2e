# app/shared/views.py
"""
Projections de lecture des entités (fonctions pures).

Les modèles ORM restent des données persistées ; tout ce qui est calculé pour
l'affichage (fullName, formattedBudget, formattedSize…) vit ici.
Chaque *_view() retourne un dict en snake_case, validé ensuite par le
response_model du router (sérialisation camelCase).

`now` est injectable pour rendre les durées testables.
"""
from __future__ import annotations

import math
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from app.shared.enums import (
    IN_PROGRESS_STATUTS, ProjetStatut, UserRole,
)

# ── Helpers ───────────────────────────────────────────────────────────────────

NBSP        = "\u00a0"
NARROW_NBSP = "\u202f"

MIME_LABELS = {
    "application/pdf": "PDF",
    "application/msword": "Document Word",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "Document Word",
    "image/jpeg": "Image JPEG",
    "image/png": "Image PNG",
}

BUSINESS_TYPE_LABELS = {
    "contrat": "Contrat",
    "devis": "Devis",
    "facture": "Facture",
    "rapport": "Rapport",
    "presentation": "Présentation",
    "autre": "Autre",
}


def _value(enum_or_str) -> Optional[str]:
    if enum_or_str is None:
        return None
    return enum_or_str.value if hasattr(enum_or_str, "value") else str(enum_or_str)


def _days_since(start: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    if not start:
        return None
    now = now or datetime.now(timezone.utc)
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.ceil(abs((now - start).total_seconds()) / 86400)


def format_budget(budget) -> str:
    """Montant au format fr-FR : 150 000,00 €."""
    if budget is None:
        return "Budget non défini"
    amount = Decimal(str(budget)).quantize(Decimal("0.01"))
    text = f"{amount:,.2f}".replace(",", NARROW_NBSP).replace(".", ",")
    return f"{text}{NBSP}€"


def format_size(size: Optional[int]) -> str:
    if not size:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size) / math.log(1024))), len(units) - 1)
    value = round(size / (1024 ** i), 2)
    return f"{value:g} {units[i]}"


def readable_document_type(mime_type: Optional[str], business_type=None) -> str:
    if mime_type in MIME_LABELS:
        return MIME_LABELS[mime_type]
    return BUSINESS_TYPE_LABELS.get(_value(business_type), "Fichier")


def file_extension(filename: Optional[str]) -> str:
    if not filename:
        return ""
    return os.path.splitext(filename)[1].lstrip(".").lower()


# ── User ──────────────────────────────────────────────────────────────────────

def full_name(user) -> str:
    return f"{user.first_name} {user.last_name}".strip()


def user_view(user) -> Dict[str, Any]:
    """Jamais de mot de passe. Champs pro à None pour les rôles non pro."""
    role = UserRole(_value(user.role))
    pro = role.is_professional
    return {
        "id":                 user.id,
        "first_name":         user.first_name,
        "last_name":          user.last_name,
        "full_name":          full_name(user),
        "email":              user.email,
        "telephone":          user.telephone,
        "role":               role,
        "is_active":          user.is_active,
        "last_login":         user.last_login,
        "zones_intervention": user.zones_intervention if pro else None,
        "tags_metiers":       user.tags_metiers if pro else None,
        "nom_entreprise":     user.nom_entreprise if pro else None,
        "site_web":           user.site_web if pro else None,
        "siret":              user.siret if pro else None,
        "note_fiabilite":     user.note_fiabilite if pro else None,
        "created_at":         user.created_at,
        "updated_at":         user.updated_at,
    }


def user_summary(user) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id":         user.id,
        "first_name": user.first_name,
        "last_name":  user.last_name,
        "full_name":  full_name(user),
        "email":      user.email,
        "telephone":  user.telephone,
    }


# ── Projet ────────────────────────────────────────────────────────────────────

def projet_view(projet, client=None, amo=None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """client / amo sont passés explicitement : pas de chargement paresseux en async."""
    statut = ProjetStatut(_value(projet.statut))
    return {
        "id":                projet.id,
        "client_id":         projet.client_id,
        "amo_id":            projet.amo_id,
        "statut":            statut,
        "description":       projet.description,
        "address":           projet.address,
        "city":              projet.city,
        "postal_code":       projet.postal_code,
        "budget":            projet.budget,
        "surface_m2":        projet.surface_m2,
        "bedrooms":          projet.bedrooms,
        "house_type":        projet.house_type,
        "has_land":          projet.has_land,
        "date_submission":   projet.date_submission,
        "date_modification": projet.date_modification,
        "is_active":         projet.is_active,
        # ── Calculés ─────────────────────────────────────────
        "full_address":      f"{projet.address}, {projet.postal_code} {projet.city}",
        "formatted_budget":  format_budget(projet.budget),
        "is_in_progress":    statut in IN_PROGRESS_STATUTS,
        "is_completed":      statut == ProjetStatut.CLOTURE,
        "project_duration":  _days_since(projet.date_submission, now),
        "client":            user_summary(client),
        "amo":               user_summary(amo),
    }


# ── Mission ───────────────────────────────────────────────────────────────────

def mission_view(mission, now: Optional[datetime] = None) -> Dict[str, Any]:
    tags = list(mission.tags_metiers or [])
    return {
        "id":               mission.id,
        "project_id":       mission.project_id,
        "tags_metiers":     tags,
        "commentaire_amo":  mission.commentaire_amo,
        "date_creation":    mission.date_creation,
        "statut":           mission.statut,
        "is_active":        mission.is_active,
        "tags_count":       len(tags),
        "mission_duration": _days_since(mission.date_creation, now),
    }


# ── Document ──────────────────────────────────────────────────────────────────

def document_view(doc) -> Dict[str, Any]:
    ext = file_extension(doc.nom_original or doc.nom_fichier or doc.nom)
    return {
        "id":             doc.id,
        "user_id":        doc.user_id,
        "projet_id":      doc.projet_id,
        "nom":            doc.nom,
        "nom_original":   doc.nom_original,
        "nom_fichier":    doc.nom_fichier,
        "type":           doc.type,
        "mime_type":      doc.mime_type,
        "taille_fichier": doc.taille_fichier,
        "format_fichier": doc.format_fichier,
        # lien externe des documents référencés ; le chemin disque reste interne
        "lien_fichier":   None if doc.chemin_fichier else doc.lien_fichier,
        "author_type":    doc.author_type,
        "visibilite":     doc.visibilite,
        "is_active":      doc.is_active,
        "created_at":     doc.created_at,
        # ── Calculés ─────────────────────────────────────────
        "file_extension": ext,
        "formatted_size": format_size(doc.taille_fichier),
        "is_pdf":         doc.mime_type == "application/pdf" or ext == "pdf",
        "readable_type":  readable_document_type(doc.mime_type, doc.type),
    }
