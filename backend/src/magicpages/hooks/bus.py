"""Lifecycle bus.

Delivers named events to before/after subscribers in priority order and
lets callers attach callable members ("hook methods") to every page of
a template. The bus never catches exceptions raised by subscribers.
"""

import itertools
import logging
from typing import Any, Callable

from magicpages.hooks.types import HookEvent, HookFn, Predicate, Subscription

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 100


class HookBus:
    """Registry and dispatcher for lifecycle hooks.

    Example:
        bus.add_hook_after("Pages.saved", audit, when=lambda e: e.argument(0).id > 0)
        bus.run("Pages.saved", page)
    """

    def __init__(self) -> None:
        self._events: dict[str, list[Subscription]] = {}
        self._methods: dict[tuple[str, str], list[Subscription]] = {}
        self._counter = itertools.count()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_hook_before(
        self,
        event: str,
        fn: HookFn,
        priority: int = DEFAULT_PRIORITY,
        when: Predicate | None = None,
    ) -> Subscription:
        return self._add(event, fn, "before", priority, when)

    def add_hook_after(
        self,
        event: str,
        fn: HookFn,
        priority: int = DEFAULT_PRIORITY,
        when: Predicate | None = None,
    ) -> Subscription:
        return self._add(event, fn, "after", priority, when)

    def add_hook_method(
        self,
        owner: str,
        name: str,
        fn: HookFn,
        priority: int = DEFAULT_PRIORITY,
    ) -> Subscription:
        """Attach a callable member `name` to all pages of template `owner`.

        All handlers for the same (owner, name) run in priority order and
        the last one to set `return_value` wins, so lower priorities have
        lower precedence.
        """
        sub = Subscription(
            event=name,
            fn=fn,
            when="method",
            priority=priority,
            owner=owner,
            order=next(self._counter),
        )
        self._methods.setdefault((owner, name), []).append(sub)
        return sub

    def _add(
        self,
        event: str,
        fn: HookFn,
        when: str,
        priority: int,
        predicate: Predicate | None,
    ) -> Subscription:
        sub = Subscription(
            event=event,
            fn=fn,
            when=when,
            priority=priority,
            predicate=predicate,
            order=next(self._counter),
        )
        self._events.setdefault(event, []).append(sub)
        logger.debug("Hook %s %s installed (priority %d)", when, event, priority)
        return sub

    def remove(self, sub: Subscription) -> None:
        """Remove a previously installed subscription."""
        if sub.when == "method":
            self._methods.get((sub.owner or "", sub.event), []).remove(sub)
        else:
            self._events.get(sub.event, []).remove(sub)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def subscriptions(self, event: str, when: str | None = None) -> list[Subscription]:
        """Installed subscriptions for an event, in delivery order."""
        subs = self._ordered(self._events.get(event, []))
        if when is not None:
            subs = [s for s in subs if s.when == when]
        return subs

    def method_handlers(self, owner: str, name: str) -> list[Subscription]:
        return self._ordered(self._methods.get((owner, name), []))

    def has_method(self, owner: str, name: str) -> bool:
        return bool(self._methods.get((owner, name)))

    def methods(self, owner: str) -> list[str]:
        """Names of hook methods attached to a template."""
        return sorted({name for (o, name), subs in self._methods.items() if o == owner and subs})

    @staticmethod
    def _ordered(subs: list[Subscription]) -> list[Subscription]:
        return sorted(subs, key=lambda s: (s.priority, s.order))

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def run(
        self,
        event_name: str,
        *arguments: Any,
        obj: Any = None,
        process: Any = None,
        internal: bool = False,
        operation: Callable[..., Any] | None = None,
    ) -> Any:
        """Fire an event: before hooks, the operation, then after hooks.

        Returns:
            The event's return value (the operation's result unless an
            after hook replaced it).
        """
        event = HookEvent(
            name=event_name,
            arguments=arguments,
            object=obj,
            process=process,
            internal=internal,
        )
        for sub in self.subscriptions(event_name, "before"):
            if sub.matches(event):
                sub.fn(event)
        if operation is not None:
            event.return_value = operation(*event.arguments)
        for sub in self.subscriptions(event_name, "after"):
            if sub.matches(event):
                sub.fn(event)
        return event.return_value

    def call_method(self, obj: Any, owner: str, name: str, *arguments: Any) -> Any:
        """Invoke the hook method `name` on `obj`.

        Raises:
            AttributeError: If no handler is attached for (owner, name)
        """
        handlers = self.method_handlers(owner, name)
        if not handlers:
            raise AttributeError(
                f"'{type(obj).__name__}' object has no attribute '{name}'"
            )
        event = HookEvent(name=name, arguments=arguments, object=obj)
        for sub in handlers:
            sub.fn(event)
        return event.return_value
