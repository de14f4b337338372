"""Watches magic page classes and runs their migrate() when the class file changes.

The class file mtime seen at the last migration is kept per template. When
the watcher is given a SQLAlchemy engine the mtimes are stored in a
``magic_migrations`` table, so unchanged classes are skipped across runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import Column, Float, MetaData, String, Table, delete, select
from sqlalchemy.engine import Engine

from magicpages.core.paths import PathCache

logger = logging.getLogger(__name__)

_metadata = MetaData()

migrations_table = Table(
    "magic_migrations",
    _metadata,
    Column("template", String(128), primary_key=True),
    Column("mtime", Float, nullable=False),
)


@dataclass
class WatchedPage:
    page: Any
    path: Path
    migrate: bool


class MigrationWatcher:
    """Tracks the class file of every magic page.

    Pages that implement migrate() are migrated on the first run and
    whenever their class file's mtime changes afterwards.
    """

    def __init__(self, paths: PathCache, engine: Engine | None = None):
        self._paths = paths
        self._engine = engine
        self._watched: list[WatchedPage] = []
        self._mtimes: dict[str, float] = {}
        if engine is not None:
            _metadata.create_all(engine)
            self._mtimes.update(self._load())

    def watch(self, page: Any, migrate: bool) -> WatchedPage:
        entry = WatchedPage(page=page, path=self._paths.resolve(page), migrate=migrate)
        self._watched.append(entry)
        return entry

    @property
    def watched(self) -> list[WatchedPage]:
        return list(self._watched)

    def run(self, force: bool = False) -> list[str]:
        """Run pending migrations.

        Args:
            force: Migrate every watched page regardless of file changes

        Returns:
            Template names that were migrated, in watch order
        """
        migrated = []
        for entry in self._watched:
            if not entry.migrate:
                continue
            mtime = entry.path.stat().st_mtime if entry.path.is_file() else 0.0
            key = str(entry.page.template)
            if not force and self._mtimes.get(key) == mtime:
                continue
            entry.page.migrate()
            self._mtimes[key] = mtime
            migrated.append(key)
            logger.info("Migrated %s (%s)", entry.page.template, entry.path.name)
        if migrated and self._engine is not None:
            self._store(migrated)
        return migrated

    def _load(self) -> dict[str, float]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(migrations_table)).all()
        return {row.template: row.mtime for row in rows}

    def _store(self, templates: list[str]) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(migrations_table).where(migrations_table.c.template.in_(templates)))
            conn.execute(
                migrations_table.insert(),
                [{"template": name, "mtime": self._mtimes[name]} for name in templates],
            )
        logger.debug("Stored migration state for %s", ", ".join(templates))
