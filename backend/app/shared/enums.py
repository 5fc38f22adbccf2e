# app/shared/enums.py
"""
Toutes les énumérations du projet Experta.

Source unique de vérité pour les statuts, rôles et types.
Importé par les modèles, schemas, services et deps.

Les rôles arrivent parfois avec une casse incohérente ("amo", "AMO", "Amo") :
UserRole se normalise tout seul via _missing_, la valeur canonique est
toujours celle stockée et renvoyée.
"""

from enum import Enum


class UserRole(str, Enum):
    CLIENT     = "client"
    AMO        = "AMO"          # Assistance à Maîtrise d'Ouvrage
    PARTENAIRE = "partenaire"   # Artisan / entreprise du bâtiment
    ADMIN      = "admin"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None

    @property
    def is_professional(self) -> bool:
        return self in PROFESSIONAL_ROLES


PROFESSIONAL_ROLES = frozenset({UserRole.AMO, UserRole.PARTENAIRE})


class ProjetStatut(str, Enum):
    BROUILLON           = "brouillon"
    EN_ATTENTE_AMO      = "en_attente_AMO"
    EN_MISE_EN_RELATION = "en_mise_en_relation"
    DEVIS_RECUS         = "devis_reçus"
    CLOTURE             = "clôturé"


IN_PROGRESS_STATUTS = frozenset({
    ProjetStatut.EN_ATTENTE_AMO,
    ProjetStatut.EN_MISE_EN_RELATION,
    ProjetStatut.DEVIS_RECUS,
})


class HouseType(str, Enum):
    PLAIN_PIED = "plain-pied"
    ETAGE      = "étage"
    AUTRE      = "autre"


class MissionStatut(str, Enum):
    EN_ATTENTE = "en_attente"
    EN_COURS   = "en_cours"
    TERMINE    = "terminé"


class DocumentType(str, Enum):
    CONTRAT      = "contrat"
    DEVIS        = "devis"
    FACTURE      = "facture"
    RAPPORT      = "rapport"
    PRESENTATION = "presentation"
    AUTRE        = "autre"


class AuthorType(str, Enum):
    CLIENT = "client"
    AMO    = "AMO"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


class Visibilite(str, Enum):
    PRIVE   = "prive"
    PARTAGE = "partage"
