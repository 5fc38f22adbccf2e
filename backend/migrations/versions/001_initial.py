"""initial schema : experta v1

Revision ID: 001_initial
Create Date: 19/10/2026
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '001_initial'
down_revision = None

# Valeurs des Enums (valeurs stockées, cf. core.database.pg_enum)
USER_ROLE      = ('client', 'AMO', 'partenaire', 'admin')
PROJET_STATUT  = ('brouillon', 'en_attente_AMO', 'en_mise_en_relation', 'devis_reçus', 'clôturé')
HOUSE_TYPE     = ('plain-pied', 'étage', 'autre')
MISSION_STATUT = ('en_attente', 'en_cours', 'terminé')
DOCUMENT_TYPE  = ('contrat', 'devis', 'facture', 'rapport', 'presentation', 'autre')
AUTHOR_TYPE    = ('client', 'AMO')
VISIBILITE     = ('prive', 'partage')

ENUMS = {
    "userrole": USER_ROLE,
    "projetstatut": PROJET_STATUT,
    "housetype": HOUSE_TYPE,
    "missionstatut": MISSION_STATUT,
    "documenttype": DOCUMENT_TYPE,
    "authortype": AUTHOR_TYPE,
    "visibilite": VISIBILITE,
}


def _enum(values, name):
    return postgresql.ENUM(*values, name=name, create_type=False)


def upgrade() -> None:
    # ── 1. TYPES ENUM (idempotent) ──
    for name, values in ENUMS.items():
        vals_str = ", ".join([f"'{v}'" for v in values])
        op.execute(f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = '{name}') THEN
                    CREATE TYPE {name} AS ENUM ({vals_str});
                END IF;
            END $$;
        """)

    # ── 2. TABLES ──
    op.create_table("users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False, unique=True),
        sa.Column("telephone", sa.String(20), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", _enum(USER_ROLE, "userrole"), nullable=False, server_default="client"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("zones_intervention", postgresql.JSONB, nullable=True),
        sa.Column("tags_metiers", postgresql.JSONB, nullable=True),
        sa.Column("nom_entreprise", sa.String(100), nullable=True),
        sa.Column("site_web", sa.String(255), nullable=True),
        sa.Column("siret", sa.String(14), nullable=True),
        sa.Column("note_fiabilite", sa.Float, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "note_fiabilite IS NULL OR (note_fiabilite >= 0 AND note_fiabilite <= 5)",
            name="ck_users_note_fiabilite",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table("projets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("client_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amo_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("statut", _enum(PROJET_STATUT, "projetstatut"), nullable=False, server_default="brouillon"),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(5), nullable=False),
        sa.Column("budget", sa.Numeric(10, 2), nullable=True),
        sa.Column("surface_m2", sa.Integer, nullable=True),
        sa.Column("bedrooms", sa.Integer, nullable=True),
        sa.Column("house_type", _enum(HOUSE_TYPE, "housetype"), nullable=True),
        sa.Column("has_land", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("date_submission", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("date_modification", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.CheckConstraint("budget IS NULL OR budget >= 0", name="ck_projets_budget"),
        sa.CheckConstraint("surface_m2 IS NULL OR surface_m2 >= 1", name="ck_projets_surface"),
        sa.CheckConstraint("bedrooms IS NULL OR bedrooms >= 0", name="ck_projets_bedrooms"),
    )
    op.create_index("ix_projets_client_id", "projets", ["client_id"])
    op.create_index("ix_projets_amo_id", "projets", ["amo_id"])
    op.create_index("ix_projets_statut", "projets", ["statut"])
    op.create_index("ix_projets_city", "projets", ["city"])

    op.create_table("missions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("project_id", sa.Integer, sa.ForeignKey("projets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tags_metiers", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("commentaire_amo", sa.String(2000), nullable=True),
        sa.Column("date_creation", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("statut", _enum(MISSION_STATUT, "missionstatut"), nullable=False, server_default="en_attente"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_missions_project_id", "missions", ["project_id"])
    op.create_index("ix_missions_statut", "missions", ["statut"])

    op.create_table("documents",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("projet_id", sa.Integer, sa.ForeignKey("projets.id", ondelete="CASCADE"), nullable=True),
        sa.Column("nom", sa.String(255), nullable=False),
        sa.Column("type", _enum(DOCUMENT_TYPE, "documenttype"), nullable=False, server_default="autre"),
        sa.Column("lien_fichier", sa.String(500), nullable=True),
        sa.Column("taille_fichier", sa.Integer, nullable=False, server_default="0"),
        sa.Column("format_fichier", sa.String(10), nullable=True),
        sa.Column("nom_original", sa.String(255), nullable=True),
        sa.Column("nom_fichier", sa.String(255), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("chemin_fichier", sa.String(500), nullable=True),
        sa.Column("author_type", _enum(AUTHOR_TYPE, "authortype"), nullable=False, server_default="client"),
        sa.Column("visibilite", _enum(VISIBILITE, "visibilite"), nullable=False, server_default="prive"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("taille_fichier >= 0", name="ck_documents_taille"),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])
    op.create_index("ix_documents_projet_id", "documents", ["projet_id"])
    op.create_index("ix_documents_mime_type", "documents", ["mime_type"])


def downgrade() -> None:
    for table in ("documents", "missions", "projets", "users"):
        op.drop_table(table)

    for name in ENUMS:
        op.execute(f"DROP TYPE IF EXISTS {name}")
