"""Short field accessors.

Makes a field named "foo_bar_baz" callable as ``page.baz()``. Useful when
fields carry long prefixes to avoid name collisions across templates.

Accessor modes:
    page.baz()   -> output value: page.edit("foo_bar_baz"), strings run
                    through the optional markup renderer
    page.baz(1)  -> formatted value, no rendering
    page.baz(2)  -> unformatted (stored) value
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from magicpages.hooks import HookBus, HookEvent, Subscription

logger = logging.getLogger(__name__)

SEPARATOR = "_"
MARKUP_MODULE = "markup"

# Attached as early as possible: handlers added later take precedence,
# so framework methods of the same name are never overwritten.
ACCESSOR_PRIORITY = 0

RAW_FORMATTED = 1
RAW_UNFORMATTED = 2


@runtime_checkable
class MarkupRenderer(Protocol):
    def html(self, value: str) -> str: ...


def short_name(field_name: str, separator: str = SEPARATOR) -> str:
    """Last separator-delimited segment of a field name."""
    return field_name.rsplit(separator, 1)[-1]


class FieldAccessorSynthesizer:
    """Installs short-name hook methods for the fields of a template.

    Two fields ending in the same segment collide; the one registered
    last wins because its handler runs after the earlier one.
    """

    def __init__(self, bus: HookBus, modules: Mapping[str, Any] | None = None):
        self._bus = bus
        self._modules = modules if modules is not None else {}
        self._installed: dict[tuple[str, str], dict[str, Subscription]] = {}

    def synthesize(self, template: Any) -> dict[str, str]:
        """Install accessors for every field of template.

        Returns:
            Mapping of short name to the field name it now resolves to
        """
        resolved: dict[str, str] = {}
        for definition in template.fields:
            method = short_name(definition.name)
            handlers = self._installed.setdefault((template.name, method), {})
            previous = handlers.pop(definition.name, None)
            if previous is not None:
                # Re-registration moves the handler to the end of the queue
                self._bus.remove(previous)
            sub = self._bus.add_hook_method(
                template.name,
                method,
                self._accessor(definition.name),
                priority=ACCESSOR_PRIORITY,
            )
            handlers[definition.name] = sub
            resolved[method] = definition.name
            logger.debug("Accessor %s.%s() -> %s", template.name, method, definition.name)
        return resolved

    def accessors(self, template_name: str) -> dict[str, str]:
        """Short names installed for a template and the fields they read."""
        return {
            method: list(handlers)[-1]
            for (owner, method), handlers in self._installed.items()
            if owner == template_name and handlers
        }

    def _renderer(self) -> MarkupRenderer | None:
        renderer = self._modules.get(MARKUP_MODULE)
        if isinstance(renderer, MarkupRenderer):
            return renderer
        return None

    def _accessor(self, field_name: str):
        def accessor(event: HookEvent) -> None:
            page = event.object
            raw = event.argument(0)
            if raw == RAW_UNFORMATTED:
                event.return_value = page.get_unformatted(field_name)
                return
            if raw:
                event.return_value = page.get_formatted(field_name)
                return
            value = page.edit(field_name)
            if isinstance(value, str):
                renderer = self._renderer()
                if renderer is not None:
                    value = renderer.html(value)
            event.return_value = value

        return accessor
