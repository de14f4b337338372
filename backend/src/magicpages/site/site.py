"""The site: configuration, hook bus, templates, pages and the page editor."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from magicpages.config import MagicConfig
from magicpages.core.assets import ASSETS_MODULE, AssetList
from magicpages.core.orchestrator import MagicPages
from magicpages.hooks import HookBus, events
from magicpages.site.forms import PageEditor
from magicpages.site.store import PageStore
from magicpages.site.template import Template, TemplateLoader, Templates


class Site:
    """Wires all collaborators together.

    Example:
        site = Site.from_yaml(Path("site.yaml"))
        site.boot()
        page = site.pages.new_page("report")
        page.save()
    """

    def __init__(
        self,
        config: MagicConfig | None = None,
        templates: Templates | list[Template] | None = None,
        modules: dict[str, Any] | None = None,
    ):
        self.config = config if config is not None else MagicConfig()
        self.hooks = HookBus()
        self.templates = templates if isinstance(templates, Templates) else Templates(templates)
        self.modules: dict[str, Any] = {ASSETS_MODULE: AssetList()}
        self.modules.update(modules or {})
        self.pages = PageStore(self, self.config.database_url)
        self.editor = PageEditor(self)
        self.edit_mode = False
        self.magic = MagicPages(self)
        self._booted = False

    @classmethod
    def from_yaml(cls, site_file: Path, modules: dict[str, Any] | None = None) -> Site:
        """Create a site from a YAML file with `config:` and `templates:` sections."""
        config = MagicConfig.from_yaml(site_file)
        templates = TemplateLoader(site_file).load_all()
        return cls(config=config, templates=templates, modules=modules)

    def module(self, name: str) -> Any:
        return self.modules.get(name)

    def boot(self) -> Site:
        """Run the init and ready phases once."""
        if self._booted:
            return self
        self._booted = True
        self.hooks.run(events.SITE_INIT, obj=self)
        self.hooks.run(events.SITE_READY, obj=self)
        return self
