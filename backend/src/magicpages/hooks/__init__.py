"""Lifecycle bus for MagicPages.

Provides before/after interception of named operations with ordered
priority, predicate filters and per-template hook methods:

    from magicpages.hooks import HookBus, events

    bus = HookBus()
    bus.add_hook_after(events.PAGES_SAVED, lambda e: print(e.argument(0)))
"""

from magicpages.hooks import events
from magicpages.hooks.bus import DEFAULT_PRIORITY, HookBus
from magicpages.hooks.types import HookEvent, HookFn, Predicate, Subscription

__all__ = [
    "DEFAULT_PRIORITY",
    "HookBus",
    "HookEvent",
    "HookFn",
    "Predicate",
    "Subscription",
    "events",
]
