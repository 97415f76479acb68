from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pgbootstrap.sql import SqlExecutor, StatementReport, apply_statements, quote_literal


DEFAULT_TECH_STACK = "Next.js + FastAPI + PostgreSQL"


@dataclass(frozen=True)
class TemplateSeed:
    name: str
    description: str
    category: str
    tech_stack: str = DEFAULT_TECH_STACK
    content: dict[str, Any] = field(default_factory=dict)

    def insert_sql(self) -> str:
        content = json.dumps(self.content, sort_keys=True)
        return (
            "INSERT INTO templates (name, description, category, tech_stack, content)\n"
            f"VALUES ({quote_literal(self.name)}, {quote_literal(self.description)}, "
            f"{quote_literal(self.category)}, {quote_literal(self.tech_stack)}, {quote_literal(content)}::jsonb)\n"
            "ON CONFLICT (name) DO NOTHING;"
        )


TEMPLATE_SEEDS: tuple[TemplateSeed, ...] = (
    TemplateSeed(name="CRUD App", description="Basic CRUD application template", category="application"),
    TemplateSeed(name="Admin Dashboard", description="Admin dashboard with auth and charts", category="dashboard"),
    TemplateSeed(name="Blog", description="Simple blog with posts and comments", category="content"),
)


def seed_data(executor: SqlExecutor, rows: Sequence[TemplateSeed] = TEMPLATE_SEEDS) -> StatementReport:
    return apply_statements(executor, [r.insert_sql() for r in rows], step="seed")
