"""
Baseline application schema.

Every statement is idempotent (IF NOT EXISTS) so the whole list can be re-applied
to a database in any state. Foreign keys live only in the CREATE TABLE bodies.
"""

from __future__ import annotations

from collections.abc import Sequence

from pgbootstrap.sql import SqlExecutor, StatementReport, apply_statements


# gen_random_uuid() defaults below depend on this.
EXTENSIONS: tuple[str, ...] = ("CREATE EXTENSION IF NOT EXISTS pgcrypto;",)

TABLES: dict[str, str] = {
    "users": """CREATE TABLE IF NOT EXISTS users (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  email TEXT UNIQUE NOT NULL,
  name TEXT,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);""",
    "projects": """CREATE TABLE IF NOT EXISTS projects (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  name TEXT NOT NULL,
  description TEXT,
  status TEXT NOT NULL DEFAULT 'draft',
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);""",
    "project_versions": """CREATE TABLE IF NOT EXISTS project_versions (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  project_id UUID NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
  version INTEGER NOT NULL,
  commit_hash TEXT,
  metadata JSONB DEFAULT '{}'::jsonb,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  UNIQUE(project_id, version)
);""",
    "templates": """CREATE TABLE IF NOT EXISTS templates (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name TEXT UNIQUE NOT NULL,
  description TEXT,
  category TEXT,
  tech_stack TEXT,
  content JSONB NOT NULL DEFAULT '{}'::jsonb,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);""",
    "chats": """CREATE TABLE IF NOT EXISTS chats (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  user_id UUID REFERENCES users(id) ON DELETE SET NULL,
  project_id UUID REFERENCES projects(id) ON DELETE CASCADE,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);""",
    "chat_messages": """CREATE TABLE IF NOT EXISTS chat_messages (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  chat_id UUID NOT NULL REFERENCES chats(id) ON DELETE CASCADE,
  role TEXT NOT NULL CHECK (role IN ('user','assistant','system')),
  content TEXT NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);""",
    "generated_files": """CREATE TABLE IF NOT EXISTS generated_files (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  project_id UUID NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
  path TEXT NOT NULL,
  content TEXT,
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
  UNIQUE(project_id, path)
);""",
}

INDEXES: dict[str, str] = {
    "idx_projects_user": "CREATE INDEX IF NOT EXISTS idx_projects_user ON projects(user_id);",
    "idx_chat_messages_chat": "CREATE INDEX IF NOT EXISTS idx_chat_messages_chat ON chat_messages(chat_id);",
    "idx_generated_files_project": "CREATE INDEX IF NOT EXISTS idx_generated_files_project ON generated_files(project_id);",
    "idx_project_versions_project": "CREATE INDEX IF NOT EXISTS idx_project_versions_project ON project_versions(project_id);",
    "idx_chats_project": "CREATE INDEX IF NOT EXISTS idx_chats_project ON chats(project_id);",
}

# Order matters: extension before UUID defaults, parents before children, tables before indexes.
SCHEMA_STATEMENTS: tuple[str, ...] = (*EXTENSIONS, *TABLES.values(), *INDEXES.values())


def apply_schema(executor: SqlExecutor, statements: Sequence[str] = SCHEMA_STATEMENTS) -> StatementReport:
    return apply_statements(executor, statements, step="schema")
