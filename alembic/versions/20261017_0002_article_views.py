"""Add per-viewer article view records."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "article_views",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("article_id", sa.String(), nullable=False),
        sa.Column("viewed_by", sa.String(), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("viewed_by", "article_id", name="uq_article_views_viewer_article"),
    )
    op.create_index("ix_article_views_article_id", "article_views", ["article_id"], unique=False)
    op.create_index("ix_article_views_viewed_by", "article_views", ["viewed_by"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_article_views_viewed_by", table_name="article_views")
    op.drop_index("ix_article_views_article_id", table_name="article_views")
    op.drop_table("article_views")
