"""Templates, field definitions and the YAML template loader."""

import html
import importlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Iterator

import yaml

Formatter = Callable[[Any, "FieldDefinition"], Any]


def _format_text(value: Any, definition: "FieldDefinition") -> str:
    # Entity-encode like a text formatter would for frontend output
    if value is None:
        return ""
    return html.escape(str(value))


def _format_markup(value: Any, definition: "FieldDefinition") -> str:
    return "" if value is None else str(value)


def _format_integer(value: Any, definition: "FieldDefinition") -> int | None:
    if value in (None, ""):
        return None
    return int(value)


def _format_checkbox(value: Any, definition: "FieldDefinition") -> bool:
    return bool(value)


def _format_datetime(value: Any, definition: "FieldDefinition") -> str:
    """Unix timestamp -> formatted date string."""
    if not value:
        return ""
    stamp = datetime.fromtimestamp(int(value), UTC)
    return stamp.strftime(definition.format or "%Y-%m-%d")


@dataclass
class FieldType:
    name: str
    formatter: Formatter
    default: Any = None


# Built-in field types
FIELD_TYPES: dict[str, FieldType] = {
    "text": FieldType(name="text", formatter=_format_text, default=""),
    "textarea": FieldType(name="textarea", formatter=_format_text, default=""),
    "markup": FieldType(name="markup", formatter=_format_markup, default=""),
    "integer": FieldType(name="integer", formatter=_format_integer),
    "checkbox": FieldType(name="checkbox", formatter=_format_checkbox, default=0),
    "datetime": FieldType(name="datetime", formatter=_format_datetime),
}


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition, defaulting to text if unknown."""
    return FIELD_TYPES.get(type_name, FIELD_TYPES["text"])


@dataclass
class FieldDefinition:
    name: str
    type: str = "text"
    label: str = ""
    format: str | None = None  # strftime pattern for datetime fields

    def formatted(self, value: Any) -> Any:
        return get_field_type(self.type).formatter(value, self)

    @property
    def default(self) -> Any:
        return get_field_type(self.type).default


@dataclass
class Template:
    """A page type: its name, declared fields and the class its pages use."""

    name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    page_class: type | None = None
    label: str = ""

    def __str__(self) -> str:
        return self.name

    def get_field(self, name: str) -> FieldDefinition | None:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


class Templates:
    """All templates known to a site, in registration order."""

    def __init__(self, templates: list[Template] | None = None):
        self._templates: dict[str, Template] = {}
        for template in templates or []:
            self.add(template)

    def add(self, template: Template) -> None:
        self._templates[template.name] = template

    def get(self, name: str) -> Template | None:
        return self._templates.get(name)

    def names(self) -> list[str]:
        return list(self._templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(list(self._templates.values()))

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates


def import_class(path: str) -> type:
    """Import a class from a "package.module:ClassName" reference.

    Raises:
        ValueError: If the reference is malformed or cannot be imported
    """
    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Class reference '{path}' must look like 'module:ClassName'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e
    try:
        return getattr(module, class_name)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no class '{class_name}'") from None


class TemplateLoader:
    """Loads template definitions from a site YAML file.

    Expected shape:

        templates:
          - name: report
            class: myapp.pages:ReportPage
            fields:
              - name: report_title
              - {name: report_date, type: datetime, format: "%d.%m.%Y"}
    """

    def __init__(self, site_file: Path):
        self.site_file = site_file
        self.templates = Templates()

    def load_all(self) -> Templates:
        with open(self.site_file) as f:
            data = yaml.safe_load(f) or {}

        for entry in data.get("templates") or []:
            self.templates.add(self._resolve_template(entry))
        return self.templates

    def _resolve_template(self, data: dict) -> Template:
        if not isinstance(data, dict) or not data.get("name"):
            raise ValueError(f"Template definition in {self.site_file} has no name: {data!r}")

        fields = []
        for field_data in data.get("fields") or []:
            if isinstance(field_data, str):
                field_data = {"name": field_data}
            if not field_data.get("name"):
                raise ValueError(f"Field without name in template '{data['name']}'")
            fields.append(
                FieldDefinition(
                    name=field_data["name"],
                    type=field_data.get("type", "text"),
                    label=field_data.get("label", ""),
                    format=field_data.get("format"),
                )
            )

        page_class = import_class(data["class"]) if data.get("class") else None
        return Template(
            name=data["name"],
            fields=fields,
            page_class=page_class,
            label=data.get("label", ""),
        )
