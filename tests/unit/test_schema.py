from __future__ import annotations

import re


EXPECTED_TABLES = {
    "users",
    "projects",
    "project_versions",
    "templates",
    "chats",
    "chat_messages",
    "generated_files",
}
EXPECTED_INDEXES = {
    "idx_projects_user",
    "idx_chat_messages_chat",
    "idx_generated_files_project",
    "idx_project_versions_project",
    "idx_chats_project",
}


def test_schema_lists_expected_tables_and_indexes() -> None:
    from pgbootstrap.schema import INDEXES, SCHEMA_STATEMENTS, TABLES

    assert set(TABLES) == EXPECTED_TABLES
    assert set(INDEXES) == EXPECTED_INDEXES
    assert len(SCHEMA_STATEMENTS) == 1 + len(EXPECTED_TABLES) + len(EXPECTED_INDEXES)


def test_every_statement_is_repeatable() -> None:
    from pgbootstrap.schema import SCHEMA_STATEMENTS

    for sql in SCHEMA_STATEMENTS:
        assert "IF NOT EXISTS" in sql, sql


def test_referenced_tables_are_created_first() -> None:
    from pgbootstrap.schema import SCHEMA_STATEMENTS

    assert SCHEMA_STATEMENTS[0] == "CREATE EXTENSION IF NOT EXISTS pgcrypto;"
    created: list[str] = []
    for sql in SCHEMA_STATEMENTS:
        m = re.match(r"CREATE TABLE IF NOT EXISTS (\w+)", sql)
        if m:
            for ref in re.findall(r"REFERENCES (\w+)\(", sql):
                assert ref in created, (m.group(1), ref)
            created.append(m.group(1))
        idx = re.match(r"CREATE INDEX IF NOT EXISTS \w+ ON (\w+)\(", sql)
        if idx:
            assert idx.group(1) in created


def test_apply_schema_runs_each_statement() -> None:
    from pgbootstrap.schema import SCHEMA_STATEMENTS, apply_schema
    from tests.fakes import FakeExecutor

    executor = FakeExecutor()
    report = apply_schema(executor)

    assert report.ok
    assert report.step == "schema"
    assert report.applied == len(SCHEMA_STATEMENTS)
    assert executor.executed == list(SCHEMA_STATEMENTS)


def test_apply_schema_continues_past_failed_statement() -> None:
    from pgbootstrap.schema import SCHEMA_STATEMENTS, apply_schema
    from tests.fakes import FakeExecutor

    executor = FakeExecutor(fail_on=["CREATE EXTENSION"])
    report = apply_schema(executor)

    assert not report.ok
    assert report.applied == len(SCHEMA_STATEMENTS) - 1
    assert report.failures[0].statement == "CREATE EXTENSION IF NOT EXISTS pgcrypto;"
    assert executor.executed[-1] == SCHEMA_STATEMENTS[-1]
