"""Per-template cache of page class file paths."""

import inspect
import logging
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)


def class_file(page_class: type) -> Path:
    """File the class is defined in."""
    return Path(inspect.getfile(page_class)).resolve()


class PathCache:
    """Resolves and memoizes the file a page's class lives in.

    Entries are keyed by template name and never invalidated: a template's
    class does not change while the process runs. Pages without a template
    are resolved every time.
    """

    def __init__(self, probe: Callable[[type], Path] = class_file):
        self._probe = probe
        self._paths: dict[str, Path] = {}

    def resolve(self, page: Any) -> Path:
        key = str(page.template) if getattr(page, "template", None) else ""
        if key and key in self._paths:
            return self._paths[key]
        path = self._probe(type(page))
        if key:
            self._paths[key] = path
            logger.debug("Cached class file for template %s: %s", key, path)
        return path

    def cached(self) -> dict[str, Path]:
        return dict(self._paths)

    def __contains__(self, template_name: object) -> bool:
        return template_name in self._paths
