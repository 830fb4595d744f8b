"""SQLModel ORM tables for article storage."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlmodel import Field, SQLModel

ORIGINAL_LINK_CONSTRAINT = "uq_articles_original_link"


class Interest(SQLModel, table=True):
    __tablename__ = "interests"  # type: ignore[bad-override]

    id: str = Field(primary_key=True)
    name: str = Field(sa_column=Column(String(100), nullable=False, unique=True))
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


class InterestKeyword(SQLModel, table=True):
    __tablename__ = "interest_keywords"  # type: ignore[bad-override]
    __table_args__ = (
        UniqueConstraint("interest_id", "name", name="uq_interest_keywords_interest_name"),
    )

    id: int | None = Field(default=None, primary_key=True)
    interest_id: str = Field(
        sa_column=Column(
            ForeignKey("interests.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    name: str = Field(sa_column=Column(String(100), nullable=False))


class Article(SQLModel, table=True):
    __tablename__ = "articles"  # type: ignore[bad-override]
    __table_args__ = (
        UniqueConstraint("original_link", name=ORIGINAL_LINK_CONSTRAINT),
        Index("idx_articles_published_id", "published_at", "id"),
    )

    id: str = Field(primary_key=True)
    interest_id: str | None = Field(
        default=None,
        sa_column=Column(
            ForeignKey("interests.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )
    source: str = Field(sa_column=Column(String(30), nullable=False, index=True))
    original_link: str = Field(sa_column=Column(String(500), nullable=False))
    title: str = Field(sa_column=Column(Text, nullable=False))
    summary: str = Field(sa_column=Column(Text, nullable=False))
    published_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    comment_count: int = 0
    view_count: int = 0
    is_deleted: bool = Field(default=False, index=True)
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


class ArticleViewRow(SQLModel, table=True):
    __tablename__ = "article_views"  # type: ignore[bad-override]
    __table_args__ = (
        UniqueConstraint("viewed_by", "article_id", name="uq_article_views_viewer_article"),
    )

    id: str = Field(primary_key=True)
    article_id: str = Field(
        sa_column=Column(
            ForeignKey("articles.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    viewed_by: str = Field(index=True)
    viewed_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
