"""Pages, templates, persistence and the edit screen."""

from magicpages.site.forms import PAGE_NAME_FIELD, Form, Inputfield, PageEditor
from magicpages.site.page import FieldEdit, MagicPage, Page, sanitize_page_name
from magicpages.site.site import Site
from magicpages.site.store import PageStore
from magicpages.site.template import (
    FieldDefinition,
    Template,
    TemplateLoader,
    Templates,
)

__all__ = [
    "FieldDefinition",
    "FieldEdit",
    "Form",
    "Inputfield",
    "MagicPage",
    "PAGE_NAME_FIELD",
    "Page",
    "PageEditor",
    "PageStore",
    "Site",
    "Template",
    "TemplateLoader",
    "Templates",
    "sanitize_page_name",
]
