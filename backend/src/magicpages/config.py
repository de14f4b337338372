"""MagicPages configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

_FALSE_STRINGS = ("0", "false", "no", "off")


@dataclass
class MagicConfig:
    """Process-wide settings for the magic page system.

    Attributes:
        use_magic_classes: Tri-state switch. None (absent) or any truthy
            value enables discovery; exactly False or 0 disables it.
        classes_path: Web-inaccessible directory holding page classes.
            Assets found there are copied to the asset cache first.
        assets_path: Writable asset root (cache lives below it).
        database_url: SQLAlchemy URL for the page store.
    """

    use_magic_classes: bool | int | None = None
    classes_path: Path | None = None
    assets_path: Path | None = None
    database_url: str = "sqlite://"

    @property
    def is_enabled(self) -> bool:
        # Only an explicit False or integer zero switches discovery off
        if self.use_magic_classes is False:
            return False
        if type(self.use_magic_classes) is int and self.use_magic_classes == 0:
            return False
        return True

    @property
    def asset_cache_path(self) -> Path | None:
        if self.assets_path is None:
            return None
        return self.assets_path / "MagicPages" / "assets"

    @classmethod
    def from_env(cls) -> MagicConfig:
        """Create config from environment variables.

        Reads:
        1. MAGICPAGES_USE_MAGIC_CLASSES ("0", "false", "no", "off" disable)
        2. MAGICPAGES_CLASSES_PATH / MAGICPAGES_ASSETS_PATH
        3. DATABASE_URL (default: in-memory SQLite)
        """
        switch = os.environ.get("MAGICPAGES_USE_MAGIC_CLASSES")
        use_magic: bool | None = None
        if switch is not None:
            use_magic = switch.strip().lower() not in _FALSE_STRINGS

        classes_path = os.environ.get("MAGICPAGES_CLASSES_PATH")
        assets_path = os.environ.get("MAGICPAGES_ASSETS_PATH")
        return cls(
            use_magic_classes=use_magic,
            classes_path=Path(classes_path) if classes_path else None,
            assets_path=Path(assets_path) if assets_path else None,
            database_url=os.environ.get("DATABASE_URL", "sqlite://"),
        )

    @classmethod
    def from_dict(cls, data: dict, base_path: Path | None = None) -> MagicConfig:
        """Create config from a `config:` mapping (camelCase keys).

        Relative paths are resolved against base_path.
        """

        def _path(value: str | None) -> Path | None:
            if not value:
                return None
            path = Path(value)
            if base_path is not None and not path.is_absolute():
                path = base_path / path
            return path

        return cls(
            use_magic_classes=data.get("useMagicClasses"),
            classes_path=_path(data.get("classesPath")),
            assets_path=_path(data.get("assetsPath")),
            database_url=data.get("databaseUrl", "sqlite://"),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> MagicConfig:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get("config") or {}, base_path=path.parent)
