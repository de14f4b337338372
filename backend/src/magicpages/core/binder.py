"""Lifecycle bindings for page classes.

Each capability a page class implements maps to one or more bindings
(event, page class) -> handler. Bindings live in a BindingTable; the bus
gets a single dispatcher per event, which looks up the bindings for the
exact class of the event's page and runs them in registration order.

Subclasses do not inherit bindings: every concrete class is bound on its own.
Exceptions raised by page methods propagate to whoever fired the event.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from magicpages.core.capabilities import Capability, CapabilitySet
from magicpages.hooks import HookBus, HookEvent, Subscription, events

logger = logging.getLogger(__name__)

EDIT_PROCESS = "ProcessPageEdit"
PAGE_NAME_FIELD = "_pw_page_name"
PAGE_NAME_NOTE = "Page name will be set automatically on save."

Handler = Callable[[HookEvent, Any], None]
Condition = Callable[[HookEvent, Any], bool]


@dataclass(frozen=True)
class Binding:
    """One installed capability binding.

    Attributes:
        event: Lifecycle event name
        page_class: Exact class whose pages trigger the handler
        capability: The capability this binding serves
        handler: Called with (hook event, page)
        condition: Optional extra filter evaluated before the handler
    """

    event: str
    page_class: type
    capability: Capability
    handler: Handler
    condition: Condition | None = None

    def applies(self, event: HookEvent, page: Any) -> bool:
        return self.condition is None or self.condition(event, page)


# ----------------------------------------------------------------------
# Event subjects: which page an event is about
# ----------------------------------------------------------------------


def _first_argument(event: HookEvent) -> Any:
    return event.argument(0)


def _event_object(event: HookEvent) -> Any:
    return event.object


def _edited_page(event: HookEvent) -> Any:
    process = event.process if event.process is not None else event.object
    get_page = getattr(process, "get_page", None)
    if get_page is None:
        return None
    return get_page()


SUBJECTS: dict[str, Callable[[HookEvent], Any]] = {
    events.PAGES_SAVE_READY: _first_argument,
    events.PAGES_SAVED: _first_argument,
    events.PAGES_ADDED: _first_argument,
    events.PAGES_TRASHED: _first_argument,
    events.PAGE_CHANGED: _event_object,
    events.EDIT_BUILD_FORM: _edited_page,
    events.EDIT_BUILD_FORM_CONTENT: _edited_page,
    events.EDIT_BUILD_FORM_SETTINGS: _edited_page,
    events.FORM_PROCESS_INPUT: _edited_page,
}


# ----------------------------------------------------------------------
# Conditions
# ----------------------------------------------------------------------


def _without_id(event: HookEvent, page: Any) -> bool:
    return not page.id


def _with_id(event: HookEvent, page: Any) -> bool:
    return bool(page.id)


def _in_page_editor(event: HookEvent, page: Any) -> bool:
    return getattr(event.process, "name", None) == EDIT_PROCESS


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------


def _saved(event: HookEvent, page: Any) -> None:
    page.on_saved()


def _save_ready(event: HookEvent, page: Any) -> None:
    page.on_save_ready()


def _create(event: HookEvent, page: Any) -> None:
    page.on_create()


def _added(event: HookEvent, page: Any) -> None:
    page.on_added()


def _trashed(event: HookEvent, page: Any) -> None:
    page.on_trashed()


def _edit_form(event: HookEvent, page: Any) -> None:
    page.edit_form(event.return_value, page)


def _edit_form_content(event: HookEvent, page: Any) -> None:
    page.edit_form_content(event.return_value, page)


def _edit_form_settings(event: HookEvent, page: Any) -> None:
    page.edit_form_settings(event.return_value, page)


def _process_input(event: HookEvent, page: Any) -> None:
    page.on_process_input(event.argument(0), event.return_value)


def _changed(event: HookEvent, page: Any) -> None:
    page.on_changed(event.argument(0), event.argument(1), event.argument(2))


def _apply_page_name(event: HookEvent, page: Any) -> None:
    """Rename the page from its own state and persist it again.

    The re-save is flagged internal so the dispatcher skips every save
    binding for it, including this one.
    """
    page.set_name(page.set_page_name())
    page.save(internal=True)


def _annotate_name_field(event: HookEvent, page: Any) -> None:
    form = event.return_value
    inputfield = form.get(PAGE_NAME_FIELD) if form is not None else None
    if inputfield is None:
        return
    inputfield.prepend_markup = (
        f"<style>#wrap_{inputfield.id} input[type=text] {{ display: none; }}</style>"
    )
    inputfield.notes = PAGE_NAME_NOTE
    inputfield.disabled = True


# (event, handler, condition) per capability; init, ready and migrate
# are driven by the startup orchestrator and bind nothing here
CAPABILITY_BINDINGS: dict[Capability, tuple[tuple[str, Handler, Condition | None], ...]] = {
    Capability.EDIT_FORM: ((events.EDIT_BUILD_FORM, _edit_form, None),),
    Capability.EDIT_FORM_CONTENT: ((events.EDIT_BUILD_FORM_CONTENT, _edit_form_content, None),),
    Capability.EDIT_FORM_SETTINGS: (
        (events.EDIT_BUILD_FORM_SETTINGS, _edit_form_settings, None),
    ),
    Capability.ON_SAVED: ((events.PAGES_SAVED, _saved, None),),
    Capability.ON_SAVE_READY: ((events.PAGES_SAVE_READY, _save_ready, None),),
    Capability.ON_CREATE: ((events.PAGES_SAVE_READY, _create, _without_id),),
    Capability.ON_ADDED: ((events.PAGES_ADDED, _added, None),),
    Capability.ON_TRASHED: ((events.PAGES_TRASHED, _trashed, None),),
    Capability.ON_PROCESS_INPUT: ((events.FORM_PROCESS_INPUT, _process_input, _in_page_editor),),
    Capability.ON_CHANGED: ((events.PAGE_CHANGED, _changed, None),),
    Capability.SET_PAGE_NAME: (
        (events.PAGES_SAVED, _apply_page_name, _with_id),
        (events.EDIT_BUILD_FORM, _annotate_name_field, None),
    ),
}


class BindingTable:
    """Bindings keyed by (event, exact page class)."""

    def __init__(self) -> None:
        self._bindings: dict[tuple[str, type], list[Binding]] = {}

    def add(self, binding: Binding) -> bool:
        """Add a binding; the first one per (event, class, capability) wins.

        Returns:
            True if the binding was added, False if it was already present
        """
        bucket = self._bindings.setdefault((binding.event, binding.page_class), [])
        if any(b.capability is binding.capability for b in bucket):
            return False
        bucket.append(binding)
        return True

    def lookup(self, event: str, page_class: type) -> list[Binding]:
        return list(self._bindings.get((event, page_class), ()))

    def for_class(self, page_class: type) -> list[Binding]:
        return [b for b in self if b.page_class is page_class]

    def events(self) -> list[str]:
        return sorted({event for event, _ in self._bindings})

    def __iter__(self) -> Iterator[Binding]:
        for bucket in self._bindings.values():
            yield from bucket

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._bindings.values())

    def clear(self) -> None:
        self._bindings.clear()


class LifecycleBinder:
    """Installs capability bindings and dispatches lifecycle events to them."""

    def __init__(self, bus: HookBus, table: BindingTable | None = None):
        self._bus = bus
        self.table = table if table is not None else BindingTable()
        self._dispatchers: dict[str, Subscription] = {}

    def bind(self, page_class: type, capabilities: CapabilitySet) -> list[Binding]:
        """Bind every implemented capability of page_class.

        Returns:
            The bindings that were newly added
        """
        added: list[Binding] = []
        for capability in capabilities.present():
            for event_name, handler, condition in CAPABILITY_BINDINGS.get(capability, ()):
                binding = Binding(
                    event=event_name,
                    page_class=page_class,
                    capability=capability,
                    handler=handler,
                    condition=condition,
                )
                if not self.table.add(binding):
                    continue
                self._ensure_dispatcher(event_name)
                added.append(binding)
                logger.debug(
                    "Bound %s.%s to %s", page_class.__name__, capability.value, event_name
                )
        return added

    def _ensure_dispatcher(self, event_name: str) -> None:
        if event_name in self._dispatchers:
            return
        self._dispatchers[event_name] = self._bus.add_hook_after(event_name, self.dispatch)

    @property
    def dispatchers(self) -> dict[str, Subscription]:
        return dict(self._dispatchers)

    def dispatch(self, event: HookEvent) -> None:
        """Run the bindings of the event's page class."""
        if event.internal and event.name in events.SAVE_EVENTS:
            return
        resolve = SUBJECTS.get(event.name)
        if resolve is None:
            return
        page = resolve(event)
        if page is None:
            return
        for binding in self.table.lookup(event.name, type(page)):
            if binding.applies(event, page):
                binding.handler(event, page)
