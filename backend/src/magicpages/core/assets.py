"""Edit screen assets that live next to a page class.

ReportPage.py gets ReportPage.css and ReportPage.js loaded on its edit
screen. Class directories are not web-accessible, so assets found below
the configured classes path are copied into the asset cache first.
"""

import logging
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from magicpages.config import MagicConfig
from magicpages.core.paths import PathCache
from magicpages.hooks import HookEvent

logger = logging.getLogger(__name__)

ASSETS_MODULE = "assets"
ASSET_EXTENSIONS = ("css", "js")


@runtime_checkable
class AssetCollector(Protocol):
    def add_styles(self, path: Path) -> None: ...

    def add_scripts(self, path: Path) -> None: ...


@dataclass
class AssetList:
    """Collects asset paths for the current edit screen.

    The page editor resets it whenever it opens a page.
    """

    styles: list[Path] = field(default_factory=list)
    scripts: list[Path] = field(default_factory=list)

    def add_styles(self, path: Path) -> None:
        if path not in self.styles:
            self.styles.append(path)

    def add_scripts(self, path: Path) -> None:
        if path not in self.scripts:
            self.scripts.append(path)

    def reset(self) -> None:
        self.styles.clear()
        self.scripts.clear()


def _mtime(path: Path) -> float:
    return path.stat().st_mtime if path.is_file() else 0.0


def _is_below(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True


class PageAssets:
    """Registers a page's co-located css/js files after its edit form is built."""

    def __init__(
        self,
        paths: PathCache,
        config: MagicConfig,
        modules: Mapping[str, Any] | None = None,
    ):
        self._paths = paths
        self._config = config
        self._modules = modules if modules is not None else {}

    def add_page_assets(self, event: HookEvent) -> list[Path]:
        """Hook callback for the buildForm event."""
        process = event.process if event.process is not None else event.object
        page = process.get_page() if hasattr(process, "get_page") else None
        if page is None:
            return []
        collector = self._modules.get(ASSETS_MODULE)
        if not isinstance(collector, AssetCollector):
            return []

        registered = []
        for asset in self.asset_files(page):
            if asset.suffix == ".css":
                collector.add_styles(asset)
            else:
                collector.add_scripts(asset)
            registered.append(asset)
        return registered

    def asset_files(self, page: Any) -> list[Path]:
        """Servable css/js paths for a page, refreshing cached copies."""
        class_path = self._paths.resolve(page)
        restricted = self._config.classes_path
        cache_dir = self._config.asset_cache_path

        files = []
        for ext in ASSET_EXTENSIONS:
            source = class_path.with_suffix(f".{ext}")
            if restricted is not None and cache_dir is not None and _is_below(class_path, restricted):
                cached = self._sync(source, cache_dir / source.name)
                if cached is not None:
                    files.append(cached)
            elif source.is_file():
                files.append(source)
        return files

    def _sync(self, source: Path, cache: Path) -> Path | None:
        """Mirror source into cache; returns the cache path if it exists afterwards."""
        if not source.is_file():
            if cache.is_file():
                cache.unlink()
                logger.debug("Removed stale cached asset %s", cache)
            return None
        if _mtime(source) > _mtime(cache):
            cache.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, cache)
            logger.debug("Copied asset %s -> %s", source, cache)
        return cache
