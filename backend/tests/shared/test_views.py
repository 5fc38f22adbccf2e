# tests/shared/test_views.py
"""
Tests des projections de lecture (shared.views) : fonctions pures.

Couverture :
    user_view      : fullName, jamais de mot de passe, champs pro masqués hors AMO/partenaire
    projet_view    : fullAddress, formattedBudget fr-FR, isInProgress / isCompleted, durée
    mission_view   : tagsCount, missionDuration
    document_view  : extension, taille lisible, isPdf, type lisible
"""
from datetime import datetime, timezone
from decimal import Decimal

from app.shared.enums import ProjetStatut, UserRole, DocumentType
from app.shared.views import (
    format_budget, format_size, readable_document_type,
    user_view, projet_view, mission_view, document_view,
)
from tests.conftest import make_user, make_amo, make_projet, make_mission, make_document

NOW = datetime(2025, 1, 11, tzinfo=timezone.utc)


class TestFormatters:
    def test_budget_fr(self):
        assert format_budget(Decimal("150000")) == "150\u202f000,00\u00a0€"

    def test_budget_absent(self):
        assert format_budget(None) == "Budget non défini"

    def test_tailles(self):
        assert format_size(0) == "0 Bytes"
        assert format_size(512) == "512 Bytes"
        assert format_size(1536) == "1.5 KB"
        assert format_size(10 * 1024 * 1024) == "10 MB"

    def test_type_lisible_par_mime_puis_type_metier(self):
        assert readable_document_type("application/pdf") == "PDF"
        assert readable_document_type("application/msword") == "Document Word"
        assert readable_document_type("image/png") == "Image PNG"
        assert readable_document_type("text/plain", DocumentType.DEVIS) == "Devis"
        assert readable_document_type("text/plain", None) == "Fichier"


class TestUserView:
    def test_full_name_sans_mot_de_passe(self):
        view = user_view(make_user(first_name="Jo", last_name="Doe"))
        assert view["full_name"] == "Jo Doe"
        assert "password" not in view
        assert "hashed_password" not in view

    def test_champs_pro_masques_pour_un_client(self):
        view = user_view(make_user(tags_metiers=["maçon"], note_fiabilite=4.0))
        assert view["tags_metiers"] is None
        assert view["note_fiabilite"] is None

    def test_champs_pro_visibles_pour_un_amo(self):
        view = user_view(make_amo(tags_metiers=["maçon"]))
        assert view["tags_metiers"] == ["maçon"]
        assert view["role"] == UserRole.AMO

    def test_role_en_chaine_canonicalise(self):
        assert user_view(make_user(role="amo"))["role"] == UserRole.AMO


class TestProjetView:
    def test_champs_calcules(self):
        view = projet_view(make_projet(), now=NOW)
        assert view["full_address"] == "12 rue des Lilas, 75011 Paris"
        assert view["formatted_budget"] == "150\u202f000,00\u00a0€"
        assert view["is_in_progress"] is False
        assert view["is_completed"] is False
        assert view["project_duration"] == 10

    def test_en_cours_et_cloture(self):
        assert projet_view(make_projet(statut=ProjetStatut.DEVIS_RECUS))["is_in_progress"] is True
        closed = projet_view(make_projet(statut=ProjetStatut.CLOTURE))
        assert closed["is_completed"] is True
        assert closed["is_in_progress"] is False

    def test_client_et_amo_explicites(self):
        view = projet_view(make_projet(amo_id=2), client=make_user(), amo=make_amo())
        assert view["client"]["full_name"] == "Jean Dupont"
        assert view["amo"]["email"] == "amo@test.com"

    def test_relations_absentes(self):
        view = projet_view(make_projet())
        assert view["client"] is None
        assert view["amo"] is None


class TestMissionView:
    def test_compteur_et_duree(self):
        view = mission_view(make_mission(tags_metiers=["plombier", "maçon"]), now=NOW)
        assert view["tags_count"] == 2
        assert view["mission_duration"] == 10


class TestDocumentView:
    def test_pdf(self):
        view = document_view(make_document())
        assert view["file_extension"] == "pdf"
        assert view["formatted_size"] == "2 KB"
        assert view["is_pdf"] is True
        assert view["readable_type"] == "PDF"

    def test_image(self):
        view = document_view(make_document(
            nom_original="photo.PNG", mime_type="image/png", taille_fichier=100,
        ))
        assert view["file_extension"] == "png"
        assert view["is_pdf"] is False
        assert view["readable_type"] == "Image PNG"

    def test_lien_expose_uniquement_pour_un_document_reference(self):
        uploaded = document_view(make_document())
        assert uploaded["lien_fichier"] is None

        referenced = document_view(make_document(
            chemin_fichier=None, nom_fichier=None, nom_original=None, nom="Devis.pdf",
            lien_fichier="https://drive.example.com/devis.pdf", mime_type=None,
        ))
        assert referenced["lien_fichier"] == "https://drive.example.com/devis.pdf"
        assert referenced["file_extension"] == "pdf"
        assert referenced["is_pdf"] is True
