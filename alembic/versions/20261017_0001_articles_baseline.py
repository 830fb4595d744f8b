"""Interests, keywords and articles baseline schema."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "interests",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_interests_name"),
    )

    op.create_table(
        "interest_keywords",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("interest_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(["interest_id"], ["interests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("interest_id", "name", name="uq_interest_keywords_interest_name"),
    )
    op.create_index(
        "ix_interest_keywords_interest_id",
        "interest_keywords",
        ["interest_id"],
        unique=False,
    )

    op.create_table(
        "articles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("interest_id", sa.String(), nullable=True),
        sa.Column("source", sa.String(length=30), nullable=False),
        sa.Column("original_link", sa.String(length=500), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["interest_id"], ["interests.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("original_link", name="uq_articles_original_link"),
    )
    op.create_index("ix_articles_interest_id", "articles", ["interest_id"], unique=False)
    op.create_index("ix_articles_source", "articles", ["source"], unique=False)
    op.create_index("ix_articles_published_at", "articles", ["published_at"], unique=False)
    op.create_index("ix_articles_is_deleted", "articles", ["is_deleted"], unique=False)
    op.create_index(
        "idx_articles_published_id",
        "articles",
        ["published_at", "id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_articles_published_id", table_name="articles")
    op.drop_index("ix_articles_is_deleted", table_name="articles")
    op.drop_index("ix_articles_published_at", table_name="articles")
    op.drop_index("ix_articles_source", table_name="articles")
    op.drop_index("ix_articles_interest_id", table_name="articles")
    op.drop_table("articles")
    op.drop_index("ix_interest_keywords_interest_id", table_name="interest_keywords")
    op.drop_table("interest_keywords")
    op.drop_table("interests")
