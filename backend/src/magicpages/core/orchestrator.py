"""Startup orchestration for magic pages.

Two passes over the template universe:

1. Discovery (after Site.init): a fresh page of every template is probed
   for the marker attribute. Magic pages get init() called, are queued for
   the ready pass, handed to the migration watcher, and get their field
   accessors and lifecycle bindings installed.
2. Ready (after Site.ready): queued pages get ready() called, in order.

Setting ``use_magic_classes`` to False or 0 switches off both passes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from magicpages.core.accessors import FieldAccessorSynthesizer
from magicpages.core.assets import PageAssets
from magicpages.core.binder import LifecycleBinder
from magicpages.core.capabilities import CapabilityRegistry, CapabilitySet, is_magic
from magicpages.core.migrations import MigrationWatcher
from magicpages.core.paths import PathCache
from magicpages.hooks import HookEvent, events

if TYPE_CHECKING:
    from magicpages.site.site import Site

logger = logging.getLogger(__name__)


class MagicPages:
    """Owns the capability registry, path cache, bindings and ready queue of a site."""

    def __init__(
        self,
        site: Site,
        capabilities: CapabilityRegistry | None = None,
        paths: PathCache | None = None,
    ):
        self.site = site
        self.capabilities = capabilities if capabilities is not None else CapabilityRegistry()
        self.paths = paths if paths is not None else PathCache()
        self.binder = LifecycleBinder(site.hooks)
        self.accessors = FieldAccessorSynthesizer(site.hooks, site.modules)
        self.assets = PageAssets(self.paths, site.config, site.modules)
        self.migrations = MigrationWatcher(self.paths, site.pages.engine)
        self.ready_queue: list[Any] | None = None
        self.magic_templates: list[str] = []
        self._discovered = False

        site.hooks.add_hook_after(events.SITE_INIT, self._on_init)
        site.hooks.add_hook_after(events.SITE_READY, self._on_ready)
        site.hooks.add_hook_after(events.EDIT_BUILD_FORM, self.assets.add_page_assets)

    def _on_init(self, event: HookEvent) -> None:
        self.discover()

    def _on_ready(self, event: HookEvent) -> None:
        self.ready()

    @property
    def enabled(self) -> bool:
        return self.site.config.is_enabled

    def discover(self) -> list[str]:
        """Probe every template and bind the magic ones.

        Returns:
            Names of the templates whose pages are magic
        """
        if self._discovered:
            logger.warning("Magic page discovery already ran; ignoring repeated call")
            return list(self.magic_templates)
        self._discovered = True
        self.ready_queue = []

        if not self.enabled:
            logger.info("Magic pages disabled by configuration")
            return []

        for template in self.site.templates:
            page = self.site.pages.new_page(template)
            if not is_magic(page):
                continue
            capabilities = self.capabilities.for_page(page)
            if capabilities.init:
                page.init()
            if capabilities.ready:
                self.ready_queue.append(page)
            self.migrations.watch(page, capabilities.migrate)
            self.add_magic_methods(page, capabilities)
            self.magic_templates.append(template.name)

        logger.info("Bound %d magic template(s)", len(self.magic_templates))
        return list(self.magic_templates)

    def add_magic_methods(self, page: Any, capabilities: CapabilitySet | None = None) -> None:
        """Install field accessors and lifecycle bindings for a page's template and class."""
        if capabilities is None:
            capabilities = self.capabilities.for_page(page)
        if page.template is not None:
            self.accessors.synthesize(page.template)
        self.binder.bind(type(page), capabilities)

    def ready(self) -> int:
        """Drain the ready queue.

        Returns:
            Number of pages whose ready() ran
        """
        queue = self.ready_queue or []
        self.ready_queue = None
        for page in queue:
            page.ready()
        return len(queue)
