"""Page base classes.

A page is one entity of a template. Field values are read and written
with item access (``page["report_title"]``); the attribute namespace is
reserved for methods, including hook methods attached to the template
at runtime (``page.title()``).
"""

from __future__ import annotations

import functools
import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from magicpages.hooks import events

if TYPE_CHECKING:
    from magicpages.site.site import Site
    from magicpages.site.template import Template

STATUS_ON = 0
STATUS_TRASHED = 1


def sanitize_page_name(value: str) -> str:
    """Convert a string to a page name: lowercase ASCII, dashes between words.

    Example: sanitize_page_name("Report - 2024") -> "report-2024"
    """
    ascii_value = (
        unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    )
    name = re.sub(r"[^a-z0-9_.]+", "-", ascii_value.lower())
    name = re.sub(r"-{2,}", "-", name)
    return name.strip("-_.")[:128]


@dataclass
class FieldEdit:
    """Edit-capable representation of a field value (front-end editing)."""

    page_id: int
    field: str
    value: Any

    def __str__(self) -> str:
        return (
            f'<edit-field page="{self.page_id}" field="{self.field}">'
            f"{self.value}</edit-field>"
        )


class Page:
    """Base class for all pages.

    Subclasses may define optional lifecycle methods (``on_saved``,
    ``set_page_name`` ...); see magicpages.core.capabilities.
    """

    def __init__(
        self,
        template: Template | None = None,
        site: Site | None = None,
        id: int = 0,
        name: str = "",
        status: int = STATUS_ON,
    ):
        self.template = template
        self.site = site
        self.id = id
        self.name = name
        self.status = status
        self._values: dict[str, Any] = {}
        self._changes: dict[str, tuple[Any, Any]] = {}
        self._tracking = False
        if template is not None:
            for definition in template.fields:
                self._values[definition.name] = definition.default

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} template={self.template} name={self.name!r}>"

    # ------------------------------------------------------------------
    # Field values
    # ------------------------------------------------------------------

    def __getitem__(self, field: str) -> Any:
        return self.get_unformatted(field)

    def __setitem__(self, field: str, value: Any) -> None:
        self.set(field, value)

    def _require_field(self, field: str):
        definition = self.template.get_field(field) if self.template else None
        if definition is None:
            raise KeyError(f"Template '{self.template}' has no field '{field}'")
        return definition

    def get_unformatted(self, field: str) -> Any:
        self._require_field(field)
        return self._values.get(field)

    def get_formatted(self, field: str) -> Any:
        definition = self._require_field(field)
        return definition.formatted(self._values.get(field))

    def edit(self, field: str) -> Any:
        """Field value for output, editable when the site is in edit mode."""
        value = self.get_formatted(field)
        if self.site is not None and self.site.edit_mode:
            return FieldEdit(page_id=self.id, field=field, value=value)
        return value

    def set(self, field: str, value: Any) -> None:
        """Set a field value, firing Page.changed when tracking is on."""
        self._require_field(field)
        old = self._values.get(field)
        self._values[field] = value
        if not self._tracking or old == value:
            return
        first_old = self._changes[field][0] if field in self._changes else old
        self._changes[field] = (first_old, value)
        if self.site is not None:
            self.site.hooks.run(events.PAGE_CHANGED, field, old, value, obj=self)

    def set_name(self, value: str | None) -> None:
        self.name = "" if value is None else sanitize_page_name(value)

    def load(self, values: dict[str, Any]) -> None:
        """Populate stored values without change tracking."""
        tracking, self._tracking = self._tracking, False
        self._values.update(values)
        self._tracking = tracking

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    # ------------------------------------------------------------------
    # Change tracking
    # ------------------------------------------------------------------

    def track_changes(self, on: bool = True) -> None:
        self._tracking = on

    @property
    def changes(self) -> dict[str, tuple[Any, Any]]:
        """Changed fields since last save: {field: (old, new)}."""
        return dict(self._changes)

    def reset_changes(self) -> None:
        self._changes.clear()

    # ------------------------------------------------------------------
    # Persistence shortcuts
    # ------------------------------------------------------------------

    @property
    def is_new(self) -> bool:
        return not self.id

    @property
    def is_trashed(self) -> bool:
        return self.status == STATUS_TRASHED

    def save(self, internal: bool = False) -> Page:
        return self._site().pages.save(self, internal=internal)

    def trash(self) -> Page:
        return self._site().pages.trash(self)

    def _site(self) -> Site:
        if self.site is None:
            raise RuntimeError(f"{self!r} is not attached to a site")
        return self.site

    # ------------------------------------------------------------------
    # Hook methods
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: class methods always win
        if name.startswith("_"):
            raise AttributeError(name)
        site = self.__dict__.get("site")
        template = self.__dict__.get("template")
        if site is not None and template is not None and site.hooks.has_method(template.name, name):
            return functools.partial(site.hooks.call_method, self, template.name, name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")


class MagicPage(Page):
    """Page that takes part in capability discovery."""

    is_magic_page = True
