"""Capability discovery for page classes.

A capability is an optional lifecycle method a page class may define.
Each capability has a runtime-checkable Protocol; a class is probed once
against all of them and the result is cached as a CapabilitySet.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

MARKER = "is_magic_page"


class Capability(str, Enum):
    """Optional page methods, valued by their method name."""

    INIT = "init"
    READY = "ready"
    MIGRATE = "migrate"
    EDIT_FORM = "edit_form"
    EDIT_FORM_CONTENT = "edit_form_content"
    EDIT_FORM_SETTINGS = "edit_form_settings"
    ON_SAVED = "on_saved"
    ON_SAVE_READY = "on_save_ready"
    ON_CREATE = "on_create"
    ON_ADDED = "on_added"
    ON_TRASHED = "on_trashed"
    ON_PROCESS_INPUT = "on_process_input"
    ON_CHANGED = "on_changed"
    SET_PAGE_NAME = "set_page_name"


@runtime_checkable
class Initializable(Protocol):
    def init(self) -> None: ...


@runtime_checkable
class Readyable(Protocol):
    def ready(self) -> None: ...


@runtime_checkable
class Migratable(Protocol):
    def migrate(self) -> None: ...


@runtime_checkable
class EditsForm(Protocol):
    def edit_form(self, form: Any, page: Any) -> None: ...


@runtime_checkable
class EditsFormContent(Protocol):
    def edit_form_content(self, form: Any, page: Any) -> None: ...


@runtime_checkable
class EditsFormSettings(Protocol):
    def edit_form_settings(self, form: Any, page: Any) -> None: ...


@runtime_checkable
class OnSaved(Protocol):
    def on_saved(self) -> None: ...


@runtime_checkable
class OnSaveReady(Protocol):
    def on_save_ready(self) -> None: ...


@runtime_checkable
class OnCreate(Protocol):
    def on_create(self) -> None: ...


@runtime_checkable
class OnAdded(Protocol):
    def on_added(self) -> None: ...


@runtime_checkable
class OnTrashed(Protocol):
    def on_trashed(self) -> None: ...


@runtime_checkable
class OnProcessInput(Protocol):
    def on_process_input(self, input: Any, form: Any) -> None: ...


@runtime_checkable
class OnChanged(Protocol):
    def on_changed(self, field: str, old: Any, new: Any) -> None: ...


@runtime_checkable
class NamesItself(Protocol):
    def set_page_name(self) -> str: ...


PROTOCOLS: dict[Capability, type] = {
    Capability.INIT: Initializable,
    Capability.READY: Readyable,
    Capability.MIGRATE: Migratable,
    Capability.EDIT_FORM: EditsForm,
    Capability.EDIT_FORM_CONTENT: EditsFormContent,
    Capability.EDIT_FORM_SETTINGS: EditsFormSettings,
    Capability.ON_SAVED: OnSaved,
    Capability.ON_SAVE_READY: OnSaveReady,
    Capability.ON_CREATE: OnCreate,
    Capability.ON_ADDED: OnAdded,
    Capability.ON_TRASHED: OnTrashed,
    Capability.ON_PROCESS_INPUT: OnProcessInput,
    Capability.ON_CHANGED: OnChanged,
    Capability.SET_PAGE_NAME: NamesItself,
}


@dataclass(frozen=True)
class CapabilitySet:
    """Which capabilities a page class implements. Field names match Capability values."""

    init: bool = False
    ready: bool = False
    migrate: bool = False
    edit_form: bool = False
    edit_form_content: bool = False
    edit_form_settings: bool = False
    on_saved: bool = False
    on_save_ready: bool = False
    on_create: bool = False
    on_added: bool = False
    on_trashed: bool = False
    on_process_input: bool = False
    on_changed: bool = False
    set_page_name: bool = False

    @classmethod
    def probe(cls, page_class: type) -> "CapabilitySet":
        """Check page_class against every capability protocol."""
        flags = {
            capability.value: _implements(page_class, protocol)
            for capability, protocol in PROTOCOLS.items()
        }
        return cls(**flags)

    def __contains__(self, capability: object) -> bool:
        if not isinstance(capability, Capability):
            return False
        return getattr(self, capability.value)

    def present(self) -> list[Capability]:
        """Implemented capabilities in declaration order."""
        return [c for c in Capability if c in self]

    def as_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _implements(page_class: type, protocol: type) -> bool:
    # Attributes set to None (e.g. to switch off an inherited hook) do not count
    try:
        return issubclass(page_class, protocol)
    except TypeError:
        return False


def is_magic(page: Any) -> bool:
    """True if the page carries a truthy marker attribute."""
    return bool(getattr(page, MARKER, False))


class CapabilityRegistry:
    """Per-class cache of probed capability sets.

    Each class is probed at most once; later lookups return the cached set.
    """

    def __init__(self) -> None:
        self._sets: dict[type, CapabilitySet] = {}
        self.probe_count = 0

    def capabilities(self, page_class: type) -> CapabilitySet:
        cached = self._sets.get(page_class)
        if cached is not None:
            return cached
        capability_set = CapabilitySet.probe(page_class)
        self.probe_count += 1
        self._sets[page_class] = capability_set
        logger.debug(
            "Probed %s: %s",
            page_class.__name__,
            ", ".join(c.value for c in capability_set.present()) or "no capabilities",
        )
        return capability_set

    def for_page(self, page: Any) -> CapabilitySet:
        return self.capabilities(type(page))

    def is_known(self, page_class: type) -> bool:
        return page_class in self._sets

    def known_classes(self) -> list[type]:
        return list(self._sets)

    def clear(self) -> None:
        """Clear all cached sets. Primarily for testing."""
        self._sets.clear()
        self.probe_count = 0
