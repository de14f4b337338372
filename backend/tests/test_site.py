"""Tests for configuration, templates, pages, the page store and the editor."""

import textwrap

import pytest

from magicpages.config import MagicConfig
from magicpages.site import (
    PAGE_NAME_FIELD,
    FieldDefinition,
    MagicPage,
    Page,
    Site,
    Template,
    TemplateLoader,
    sanitize_page_name,
)
from magicpages.site.template import get_field_type, import_class


def _template(page_class=Page):
    return Template(
        name="note",
        page_class=page_class,
        fields=[
            FieldDefinition(name="note_title"),
            FieldDefinition(name="note_count", type="integer"),
            FieldDefinition(name="note_done", type="checkbox"),
        ],
    )


@pytest.fixture
def site():
    return Site(templates=[_template()])


# =============================================================================
# MagicConfig
# =============================================================================


class TestMagicConfig:
    @pytest.mark.parametrize(
        "value, enabled",
        [(None, True), (True, True), (1, True), ("0", True), (False, False), (0, False)],
    )
    def test_switch(self, value, enabled):
        assert MagicConfig(use_magic_classes=value).is_enabled is enabled

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "MAGICPAGES_USE_MAGIC_CLASSES",
            "MAGICPAGES_CLASSES_PATH",
            "MAGICPAGES_ASSETS_PATH",
            "DATABASE_URL",
        ):
            monkeypatch.delenv(name, raising=False)
        config = MagicConfig.from_env()
        assert config.is_enabled
        assert config.classes_path is None
        assert config.database_url == "sqlite://"

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_from_env_disables(self, monkeypatch, value):
        monkeypatch.setenv("MAGICPAGES_USE_MAGIC_CLASSES", value)
        assert not MagicConfig.from_env().is_enabled

    def test_from_env_paths(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MAGICPAGES_USE_MAGIC_CLASSES", "1")
        monkeypatch.setenv("MAGICPAGES_ASSETS_PATH", str(tmp_path))
        config = MagicConfig.from_env()
        assert config.is_enabled
        assert config.asset_cache_path == tmp_path / "MagicPages" / "assets"

    def test_from_yaml(self, tmp_path):
        site_file = tmp_path / "site.yaml"
        site_file.write_text(
            textwrap.dedent(
                """
                config:
                  useMagicClasses: false
                  classesPath: site/classes
                  assetsPath: /srv/assets
                """
            )
        )
        config = MagicConfig.from_yaml(site_file)
        assert not config.is_enabled
        assert config.classes_path == tmp_path / "site" / "classes"
        assert str(config.assets_path) == "/srv/assets"

    def test_from_yaml_without_config_section(self, tmp_path):
        site_file = tmp_path / "site.yaml"
        site_file.write_text("templates: []\n")
        assert MagicConfig.from_yaml(site_file).is_enabled


# =============================================================================
# Templates
# =============================================================================


class TestTemplates:
    def test_field_types(self):
        assert get_field_type("integer").name == "integer"
        assert get_field_type("unknown").name == "text"

    def test_template_lookup(self):
        template = _template()
        assert template.has_field("note_title")
        assert template.get_field("missing") is None
        assert template.field_names == ["note_title", "note_count", "note_done"]
        assert str(template) == "note"

    def test_import_class(self):
        assert import_class("magicpages.site.page:MagicPage") is MagicPage

    @pytest.mark.parametrize("ref", ["no_colon", "magicpages.nope:X", "magicpages.site.page:Nope"])
    def test_import_class_errors(self, ref):
        with pytest.raises(ValueError):
            import_class(ref)

    def test_loader(self, tmp_path):
        site_file = tmp_path / "site.yaml"
        site_file.write_text(
            textwrap.dedent(
                """
                templates:
                  - name: note
                    class: magicpages.site.page:MagicPage
                    fields:
                      - note_title
                      - {name: note_date, type: datetime, format: "%d.%m.%Y"}
                  - name: basic
                """
            )
        )
        templates = TemplateLoader(site_file).load_all()
        assert templates.names() == ["note", "basic"]
        note = templates.get("note")
        assert note.page_class is MagicPage
        assert note.get_field("note_date").format == "%d.%m.%Y"
        assert templates.get("basic").page_class is None

    def test_loader_requires_name(self, tmp_path):
        site_file = tmp_path / "site.yaml"
        site_file.write_text("templates:\n  - fields: [a]\n")
        with pytest.raises(ValueError, match="no name"):
            TemplateLoader(site_file).load_all()


# =============================================================================
# Pages
# =============================================================================


class TestPage:
    def test_sanitize_page_name(self):
        assert sanitize_page_name("Report - 2024") == "report-2024"
        assert sanitize_page_name("  Über  Café! ") == "uber-cafe"

    def test_set_name_none_clears_name(self, site):
        page = site.pages.new_page("note")
        page.set_name("Buy milk")
        page.set_name(None)
        assert page.name == ""

    def test_defaults(self, site):
        page = site.pages.new_page("note")
        assert page.is_new
        assert page["note_title"] == ""
        assert page["note_count"] is None
        assert page.get_formatted("note_done") is False

    def test_unknown_field(self, site):
        page = site.pages.new_page("note")
        with pytest.raises(KeyError):
            page["nope"]
        with pytest.raises(KeyError):
            page["nope"] = 1

    def test_change_tracking(self, site):
        page = site.pages.new_page("note")
        page["note_title"] = "a"
        page["note_title"] = "b"
        assert page.changes == {"note_title": ("", "b")}
        page.save()
        assert page.changes == {}

    def test_zero_argument_construction(self):
        page = MagicPage()
        assert page.template is None
        assert page.is_new

    def test_detached_page_cannot_save(self):
        with pytest.raises(RuntimeError):
            Page().save()


# =============================================================================
# PageStore
# =============================================================================


class TestPageStore:
    def test_save_assigns_id_and_round_trips(self, site):
        page = site.pages.new_page("note")
        page["note_title"] = "Buy milk"
        page["note_count"] = 2
        page.set_name("Buy milk")
        page.save()
        assert page.id > 0

        loaded = site.pages.get(page.id)
        assert type(loaded) is Page
        assert loaded.name == "buy-milk"
        assert loaded["note_title"] == "Buy milk"
        assert loaded["note_count"] == 2

    def test_update(self, site):
        page = site.pages.new_page("note").save()
        page["note_title"] = "changed"
        page.save()
        assert site.pages.get(page.id)["note_title"] == "changed"

    def test_get_missing(self, site):
        assert site.pages.get(999) is None

    def test_find_excludes_trash(self, site):
        kept = site.pages.new_page("note").save()
        trashed = site.pages.new_page("note").save()
        trashed.trash()
        assert [p.id for p in site.pages.find("note")] == [kept.id]
        assert len(site.pages.find(include_trashed=True)) == 2

    def test_trash_unsaved_page(self, site):
        with pytest.raises(ValueError):
            site.pages.new_page("note").trash()

    def test_new_page_unknown_template(self, site):
        with pytest.raises(ValueError, match="does not exist"):
            site.pages.new_page("nope")

    def test_file_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'site.db'}"
        first = Site(config=MagicConfig(database_url=url), templates=[_template()])
        page = first.pages.new_page("note")
        page["note_title"] = "kept"
        page.save()

        second = Site(config=MagicConfig(database_url=url), templates=[_template()])
        assert second.pages.get(page.id)["note_title"] == "kept"


# =============================================================================
# PageEditor
# =============================================================================


class TestPageEditor:
    def test_form_layout(self, site):
        page = site.pages.new_page("note").save()
        form = site.editor.edit(page)
        assert [f.name for f in form.inputfields()] == [
            "note_title",
            "note_count",
            "note_done",
            PAGE_NAME_FIELD,
        ]
        assert site.editor.get_page() is page

    def test_process_input(self, site):
        page = site.pages.new_page("note").save()
        form = site.editor.edit(page)
        site.editor.process_input(form, {"note_title": "x", PAGE_NAME_FIELD: "My Note"})
        assert page["note_title"] == "x"
        assert page.name == "my-note"

    def test_disabled_field_is_not_written(self, site):
        page = site.pages.new_page("note").save()
        form = site.editor.edit(page)
        form.get(PAGE_NAME_FIELD).disabled = True
        site.editor.process_input(form, {PAGE_NAME_FIELD: "ignored"})
        assert page.name == ""

    def test_build_without_page(self, site):
        with pytest.raises(RuntimeError):
            site.editor.build_form()
