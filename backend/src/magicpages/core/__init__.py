"""Capability-based lifecycle dispatch for magic pages.

Page classes opt in with ``is_magic_page = True`` and implement any of the
optional methods listed in Capability. Discovery binds them to the site's
lifecycle events; there is no explicit registration.
"""

from magicpages.core.accessors import FieldAccessorSynthesizer, short_name
from magicpages.core.assets import AssetList, PageAssets
from magicpages.core.binder import Binding, BindingTable, LifecycleBinder
from magicpages.core.capabilities import (
    Capability,
    CapabilityRegistry,
    CapabilitySet,
    is_magic,
)
from magicpages.core.migrations import MigrationWatcher
from magicpages.core.orchestrator import MagicPages
from magicpages.core.paths import PathCache

__all__ = [
    "AssetList",
    "Binding",
    "BindingTable",
    "Capability",
    "CapabilityRegistry",
    "CapabilitySet",
    "FieldAccessorSynthesizer",
    "LifecycleBinder",
    "MagicPages",
    "MigrationWatcher",
    "PageAssets",
    "PathCache",
    "is_magic",
    "short_name",
]
