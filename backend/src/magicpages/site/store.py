"""Page persistence.

Pages live in a single ``pages`` table; field values are stored as JSON
text. The store accepts a SQLAlchemy database URL and creates its own
engine, so it works with SQLite files, in-memory SQLite and PostgreSQL.

Every save fires the page lifecycle events on the site's hook bus:
Pages.saveReady -> (persist) -> Pages.saved -> Pages.added (first save only).
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, select
from sqlalchemy.engine import Engine

from magicpages.hooks import events
from magicpages.site.page import STATUS_TRASHED, Page

if TYPE_CHECKING:
    from magicpages.site.site import Site
    from magicpages.site.template import Template

logger = logging.getLogger(__name__)

_metadata = MetaData()

pages_table = Table(
    "pages",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("template", String(128), nullable=False),
    Column("name", String(128), nullable=False, default=""),
    Column("status", Integer, nullable=False, default=0),
    Column("data", Text, nullable=False, default="{}"),
)


class PageStore:
    """Creates, saves, trashes and loads pages of a site."""

    def __init__(self, site: Site, database_url: str = "sqlite://"):
        """Initialize the store.

        Args:
            site: The owning site (hook bus and templates)
            database_url: SQLAlchemy-compatible database URL.
                          Examples:
                            "sqlite://"  (in-memory)
                            "sqlite:///data/site.db"
        """
        self._site = site
        self._engine = create_engine(database_url)
        _metadata.create_all(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def new_page(self, template: Template | str) -> Page:
        """Construct an unsaved page of the given template."""
        if isinstance(template, str):
            resolved = self._site.templates.get(template)
            if resolved is None:
                raise ValueError(f"Template '{template}' does not exist")
            template = resolved
        page_class = template.page_class or Page
        page = page_class(template=template, site=self._site)
        page.track_changes()
        return page

    def save(self, page: Page, internal: bool = False) -> Page:
        """Persist a page and fire the save lifecycle events.

        Args:
            page: The page to persist
            internal: Marks a re-save issued from inside a save hook.
                Subscribers that react to saves must ignore it.
        """
        hooks = self._site.hooks
        is_new = page.is_new
        hooks.run(events.PAGES_SAVE_READY, page, internal=internal)

        row = {
            "template": str(page.template),
            "name": page.name,
            "status": page.status,
            "data": json.dumps(page.values),
        }
        with self._engine.begin() as conn:
            if is_new:
                result = conn.execute(pages_table.insert().values(**row))
                page.id = result.inserted_primary_key[0]
            else:
                conn.execute(
                    pages_table.update().where(pages_table.c.id == page.id).values(**row)
                )
        logger.debug("Saved %r (new=%s, internal=%s)", page, is_new, internal)

        hooks.run(events.PAGES_SAVED, page, internal=internal)
        if is_new:
            hooks.run(events.PAGES_ADDED, page, internal=internal)
        page.reset_changes()
        return page

    def trash(self, page: Page) -> Page:
        """Move a page to the trash."""
        if page.is_new:
            raise ValueError(f"Cannot trash unsaved page {page!r}")
        page.status = STATUS_TRASHED
        with self._engine.begin() as conn:
            conn.execute(
                pages_table.update()
                .where(pages_table.c.id == page.id)
                .values(status=STATUS_TRASHED)
            )
        self._site.hooks.run(events.PAGES_TRASHED, page)
        return page

    def get(self, id: int) -> Page | None:
        """Load a page by id, or None if it does not exist."""
        with self._engine.connect() as conn:
            row = conn.execute(select(pages_table).where(pages_table.c.id == id)).first()
        if row is None:
            return None
        return self._row_to_page(row)

    def find(self, template: str | None = None, include_trashed: bool = False) -> list[Page]:
        query = select(pages_table).order_by(pages_table.c.id)
        if template is not None:
            query = query.where(pages_table.c.template == template)
        if not include_trashed:
            query = query.where(pages_table.c.status != STATUS_TRASHED)
        with self._engine.connect() as conn:
            rows = conn.execute(query).all()
        return [self._row_to_page(row) for row in rows]

    def _row_to_page(self, row: Any) -> Page:
        template = self._site.templates.get(row.template)
        if template is None:
            raise ValueError(f"Page {row.id} uses unknown template '{row.template}'")
        page_class = template.page_class or Page
        page = page_class(
            template=template,
            site=self._site,
            id=row.id,
            name=row.name,
            status=row.status,
        )
        page.load(json.loads(row.data))
        page.track_changes()
        return page
