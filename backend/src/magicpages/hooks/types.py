"""Hook system types.

Defines the data structures passed around by the lifecycle bus:
- HookEvent: runtime state handed to every hook callback
- Subscription: one installed before/after hook or hook method
"""

from dataclasses import dataclass
from typing import Any, Callable

HookFn = Callable[["HookEvent"], None]
Predicate = Callable[["HookEvent"], bool]


@dataclass
class HookEvent:
    """Runtime context passed to every hook callback.

    Attributes:
        name: Event name (e.g., "Pages.saved")
        arguments: Positional arguments of the hooked operation
        object: The object the operation runs on (page for Page.* events)
        process: The admin process the event happens in, if any
        return_value: Result of the operation; after hooks may replace it
        internal: True for internal re-saves that must not re-enter page hooks
    """

    name: str
    arguments: tuple[Any, ...] = ()
    object: Any = None
    process: Any = None
    return_value: Any = None
    internal: bool = False

    def argument(self, index: int, default: Any = None) -> Any:
        """Positional argument by index, or default if not passed."""
        if index < len(self.arguments):
            return self.arguments[index]
        return default


@dataclass
class Subscription:
    """An installed hook.

    Attributes:
        event: Event or method name the hook is attached to
        fn: Callback receiving the HookEvent
        when: "before", "after" or "method"
        priority: Lower runs first
        owner: Template name for hook methods, None for events
        predicate: Optional filter evaluated against the HookEvent
    """

    event: str
    fn: HookFn
    when: str = "after"
    priority: int = 100
    owner: str | None = None
    predicate: Predicate | None = None
    order: int = 0

    def matches(self, event: HookEvent) -> bool:
        return self.predicate is None or bool(self.predicate(event))
