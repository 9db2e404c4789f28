"""Schéma initial de la plateforme Objectifs.

Rôle (fonctionnel) :
- Crée les cinq tables : business_units, users, categories, objectifs, commentaires.
- Les clés étrangères portent leur règle de suppression (CASCADE / SET NULL) ;
  l’application effectue aussi ces cascades explicitement.

Revision ID: 5e2c41a7b9d3
Revises:
Create Date: 2026-01-12 10:14:27.318402
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Identifiants Alembic
revision: str = "5e2c41a7b9d3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "business_units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nom", sa.String(length=120), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("nom"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("business_unit_id", sa.Integer(), nullable=True),
        sa.Column("bum_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["bum_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_business_unit_id"), "users", ["business_unit_id"], unique=False)
    op.create_index(op.f("ix_users_bum_id"), "users", ["bum_id"], unique=False)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nom", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("couleur", sa.String(length=20), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("ordre", sa.Integer(), nullable=True),
        sa.Column("icone", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_categories_user_id"), "categories", ["user_id"], unique=False)

    op.create_table(
        "objectifs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("validatedbyadmin", sa.Boolean(), nullable=False),
        sa.Column("annee", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("categorie_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["categorie_id"], ["categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_objectifs_user_id"), "objectifs", ["user_id"], unique=False)
    op.create_index(op.f("ix_objectifs_categorie_id"), "objectifs", ["categorie_id"], unique=False)
    op.create_index("ix_objectifs_user_annee", "objectifs", ["user_id", "annee"], unique=False)

    op.create_table(
        "commentaires",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contenu", sa.Text(), nullable=False),
        sa.Column("objectif_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["objectif_id"], ["objectifs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_commentaires_objectif_id"), "commentaires", ["objectif_id"], unique=False)
    op.create_index(op.f("ix_commentaires_user_id"), "commentaires", ["user_id"], unique=False)
    op.create_index(op.f("ix_commentaires_created_at"), "commentaires", ["created_at"], unique=False)


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_index(op.f("ix_commentaires_created_at"), table_name="commentaires")
    op.drop_index(op.f("ix_commentaires_user_id"), table_name="commentaires")
    op.drop_index(op.f("ix_commentaires_objectif_id"), table_name="commentaires")
    op.drop_table("commentaires")

    op.drop_index("ix_objectifs_user_annee", table_name="objectifs")
    op.drop_index(op.f("ix_objectifs_categorie_id"), table_name="objectifs")
    op.drop_index(op.f("ix_objectifs_user_id"), table_name="objectifs")
    op.drop_table("objectifs")

    op.drop_index(op.f("ix_categories_user_id"), table_name="categories")
    op.drop_table("categories")

    op.drop_index(op.f("ix_users_bum_id"), table_name="users")
    op.drop_index(op.f("ix_users_business_unit_id"), table_name="users")
    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")

    op.drop_table("business_units")
