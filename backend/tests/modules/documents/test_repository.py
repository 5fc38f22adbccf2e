# tests/modules/documents/test_repository.py
"""
Ensemble accessible d'un utilisateur, vérifié sur le SQL généré (dialecte PostgreSQL).
Aucune base nécessaire.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from app.modules.documents.repository import DocumentRepository
from app.shared.enums import UserRole
from app.shared.models import Document

repo = DocumentRepository()


def compiled(user_id: int, role: UserRole) -> str:
    query = select(Document.id).where(repo.accessible_condition(user_id, role))
    return str(query.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


def test_client_voit_les_documents_partages_de_son_amo():
    sql = compiled(1, UserRole.CLIENT)
    assert "documents.user_id = 1" in sql
    assert "documents.visibilite = 'partage'" in sql
    assert "documents.author_type = 'AMO'" in sql
    assert "EXISTS" in sql
    assert "projets.client_id = 1" in sql
    assert "projets.amo_id = documents.user_id" in sql


def test_amo_voit_les_documents_partages_de_ses_clients():
    sql = compiled(2, UserRole.AMO)
    assert "documents.author_type = 'client'" in sql
    assert "projets.amo_id = 2" in sql
    assert "projets.client_id = documents.user_id" in sql


def test_sous_requete_correlee_sur_documents():
    sql = compiled(1, UserRole.CLIENT)
    subquery = sql[sql.index("EXISTS"):]
    assert "FROM projets" in subquery
    assert "FROM projets, documents" not in subquery


@pytest.mark.parametrize("role", [UserRole.PARTENAIRE, UserRole.ADMIN])
def test_autres_roles_uniquement_leurs_documents(role):
    sql = compiled(3, role)
    assert "documents.user_id = 3" in sql
    assert "EXISTS" not in sql
    assert "visibilite" not in sql


def test_documents_inactifs_exclus():
    assert "documents.is_active = true" in compiled(1, UserRole.CLIENT)
