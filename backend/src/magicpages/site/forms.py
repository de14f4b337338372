"""Edit screen: forms, inputfields and the page editor process."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from magicpages.core.assets import ASSETS_MODULE, AssetList
from magicpages.hooks import events

if TYPE_CHECKING:
    from magicpages.site.page import Page
    from magicpages.site.site import Site

PAGE_NAME_FIELD = "_pw_page_name"


@dataclass
class Inputfield:
    name: str
    label: str = ""
    value: Any = None
    notes: str = ""
    prepend_markup: str = ""
    disabled: bool = False

    @property
    def id(self) -> str:
        return f"Inputfield_{self.name}"


@dataclass
class Form:
    """A named group of inputfields and nested forms."""

    name: str
    children: list[Inputfield | Form] = field(default_factory=list)

    def add(self, child: Inputfield | Form) -> None:
        self.children.append(child)

    def get(self, name: str) -> Inputfield | Form | None:
        """Find a child by name, searching nested forms depth-first."""
        for child in self.children:
            if child.name == name:
                return child
            if isinstance(child, Form):
                found = child.get(name)
                if found is not None:
                    return found
        return None

    def inputfields(self) -> list[Inputfield]:
        result: list[Inputfield] = []
        for child in self.children:
            if isinstance(child, Form):
                result.extend(child.inputfields())
            else:
                result.append(child)
        return result


class PageEditor:
    """The page edit process.

    Building the form fires buildFormContent and buildFormSettings for the
    two sections, then buildForm for the whole form. Processing input fires
    InputfieldForm.processInput with this editor as the event's process.
    """

    name = "ProcessPageEdit"

    def __init__(self, site: Site):
        self._site = site
        self._page: Page | None = None

    def get_page(self) -> Page | None:
        return self._page

    def edit(self, page: Page) -> Form:
        """Open a page in the editor and build its form."""
        self._page = page
        assets = self._site.module(ASSETS_MODULE)
        if isinstance(assets, AssetList):
            assets.reset()
        return self.build_form()

    def build_form(self) -> Form:
        return self._site.hooks.run(
            events.EDIT_BUILD_FORM, obj=self, process=self, operation=self._build_form
        )

    def build_form_content(self) -> Form:
        return self._site.hooks.run(
            events.EDIT_BUILD_FORM_CONTENT,
            obj=self,
            process=self,
            operation=self._build_form_content,
        )

    def build_form_settings(self) -> Form:
        return self._site.hooks.run(
            events.EDIT_BUILD_FORM_SETTINGS,
            obj=self,
            process=self,
            operation=self._build_form_settings,
        )

    def _build_form(self) -> Form:
        form = Form(name="ProcessPageEditForm")
        form.add(self.build_form_content())
        form.add(self.build_form_settings())
        return form

    def _build_form_content(self) -> Form:
        page = self._require_page()
        content = Form(name="ProcessPageEditContent")
        for definition in page.template.fields if page.template else []:
            content.add(
                Inputfield(
                    name=definition.name,
                    label=definition.label or definition.name,
                    value=page.get_unformatted(definition.name),
                )
            )
        return content

    def _build_form_settings(self) -> Form:
        page = self._require_page()
        settings = Form(name="ProcessPageEditSettings")
        settings.add(Inputfield(name=PAGE_NAME_FIELD, label="Name", value=page.name))
        return settings

    def process_input(self, form: Form, data: dict[str, Any]) -> Form:
        """Apply submitted values to the edited page."""
        return self._site.hooks.run(
            events.FORM_PROCESS_INPUT,
            data,
            obj=form,
            process=self,
            operation=lambda submitted: self._process_input(form, submitted),
        )

    def _process_input(self, form: Form, data: dict[str, Any]) -> Form:
        page = self._require_page()
        for inputfield in form.inputfields():
            if inputfield.name not in data or inputfield.disabled:
                continue
            value = data[inputfield.name]
            inputfield.value = value
            if inputfield.name == PAGE_NAME_FIELD:
                page.set_name(value)
            elif page.template is not None and page.template.has_field(inputfield.name):
                page.set(inputfield.name, value)
        return form

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("No page is open in the editor")
        return self._page
