"""Tests for MagicPages CLI commands."""

import os
import sys
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from magicpages.cli.main import cli

PAGES_MODULE = textwrap.dedent(
    """
    from magicpages.site import MagicPage, Page

    MIGRATIONS = []


    class ReportPage(MagicPage):
        def on_saved(self):
            pass

        def set_page_name(self):
            return self["report_title"]

        def migrate(self):
            MIGRATIONS.append(self.template.name)


    class NotePage(Page):
        pass
    """
)

SITE_YAML = textwrap.dedent(
    """
    config:
      useMagicClasses: {enabled}
      databaseUrl: "sqlite:///{database}"
    templates:
      - name: report
        class: cli_site_pages:ReportPage
        fields:
          - report_title
          - {{name: report_published_date, type: datetime}}
      - name: note
        class: cli_site_pages:NotePage
        fields: [note_title]
    """
)


def _site_yaml(site_file, enabled):
    return SITE_YAML.format(enabled=enabled, database=site_file.parent / "site.db")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def site_file(tmp_path, monkeypatch):
    """Write a site definition and an importable page class module."""
    (tmp_path / "cli_site_pages.py").write_text(PAGES_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    path = tmp_path / "site.yaml"
    path.write_text(_site_yaml(path, enabled="true"))
    return path


class TestTemplatesList:
    def test_lists_templates(self, runner, site_file):
        result = runner.invoke(cli, ["templates", "list", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "2 template(s)" in result.output
        assert "✓ report (ReportPage): migrate, on_saved, set_page_name" in result.output
        assert "- note (NotePage)" in result.output

    def test_warns_when_disabled(self, runner, site_file):
        site_file.write_text(_site_yaml(site_file, enabled="false"))
        result = runner.invoke(cli, ["templates", "list", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "disabled" in result.output

    def test_bad_class_reference(self, runner, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("templates:\n  - name: x\n    class: nowhere_module:X\n")
        result = runner.invoke(cli, ["templates", "list", "--site", str(path)])
        assert result.exit_code == 1
        assert "Cannot import module" in result.output

    def test_missing_site_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["templates", "list", "--site", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2


class TestTemplatesInspect:
    def test_inspect_magic_template(self, runner, site_file):
        result = runner.invoke(cli, ["templates", "inspect", "report", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "Magic: yes" in result.output
        assert "cli_site_pages.py" in result.output
        assert "title() -> report_title" in result.output
        assert "date() -> report_published_date" in result.output
        assert "Pages.saved -> on_saved" in result.output
        assert "Pages.saved -> set_page_name" in result.output

    def test_inspect_plain_template(self, runner, site_file):
        result = runner.invoke(cli, ["templates", "inspect", "note", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "Magic: no" in result.output
        assert "Accessors" not in result.output

    def test_inspect_unknown_template(self, runner, site_file):
        result = runner.invoke(cli, ["templates", "inspect", "nope", "--site", str(site_file)])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestMigrate:
    def test_runs_migrations(self, runner, site_file):
        result = runner.invoke(cli, ["migrate", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "migrated report" in result.output
        assert "1 template(s) migrated" in result.output

    def test_second_run_skips_unchanged_classes(self, runner, site_file):
        runner.invoke(cli, ["migrate", "--site", str(site_file)])
        result = runner.invoke(cli, ["migrate", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "No migrations to run" in result.output

    def test_force_migrates_unchanged_classes(self, runner, site_file):
        runner.invoke(cli, ["migrate", "--site", str(site_file)])
        result = runner.invoke(cli, ["migrate", "--site", str(site_file), "--force"])
        assert result.exit_code == 0
        assert "migrated report" in result.output

    def test_changed_class_file_migrates_again(self, runner, site_file):
        runner.invoke(cli, ["migrate", "--site", str(site_file)])
        pages_module = Path(sys.modules["cli_site_pages"].__file__)
        mtime = pages_module.stat().st_mtime + 10
        os.utime(pages_module, (mtime, mtime))
        result = runner.invoke(cli, ["migrate", "--site", str(site_file)])
        assert "migrated report" in result.output

    def test_nothing_when_disabled(self, runner, site_file):
        site_file.write_text(_site_yaml(site_file, enabled="false"))
        result = runner.invoke(cli, ["migrate", "--site", str(site_file)])
        assert result.exit_code == 0
        assert "No migrations to run" in result.output
