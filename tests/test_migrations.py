import logging
from pathlib import Path

import allure
from sqlalchemy import inspect, text

from newsdesk.articles.repository import SQLiteRepository

pytestmark = [
    allure.epic("Platform"),
    allure.feature("Schema Migrations"),
]


def test_alembic_schema_is_initialized_to_head(tmp_path: Path) -> None:
    repository = SQLiteRepository(tmp_path / "migrations.db")
    repository.init_schema()

    with repository.engine.connect() as connection:
        version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
    assert version == "20261017_0002"

    tables = set(inspect(repository.engine).get_table_names())
    assert {"interests", "interest_keywords", "articles", "article_views"} <= tables
    repository.close()


def test_init_schema_is_idempotent(tmp_path: Path) -> None:
    repository = SQLiteRepository(tmp_path / "twice.db")
    repository.init_schema()
    repository.add_interest("Economy", ["stocks"])

    repository.init_schema()

    assert [interest.name for interest in repository.list_interests()] == ["Economy"]
    repository.close()


def test_init_schema_leaves_logging_configuration_alone(tmp_path: Path) -> None:
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level
    app_logger = logging.getLogger("newsdesk.articles.repository")

    repository = SQLiteRepository(tmp_path / "logging.db")
    repository.init_schema()
    repository.close()

    assert root.handlers == handlers_before
    assert root.level == level_before
    assert not app_logger.disabled
