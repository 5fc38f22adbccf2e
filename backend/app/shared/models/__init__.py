# app/shared/models/__init__.py
"""
Point d'entrée unique pour tous les modèles SQLAlchemy.

TOUJOURS importer les modèles depuis ce fichier :
  from app.shared.models import User, Projet, Mission, Document

→ Garantit que tous les modèles sont enregistrés dans Base.metadata
  avant la création des tables (Alembic, create_all).
"""

from app.shared.models.user     import User
from app.shared.models.projet   import Projet
from app.shared.models.mission  import Mission
from app.shared.models.document import Document

__all__ = ["User", "Projet", "Mission", "Document"]
