"""
Binding generated elements to stable keys.

A graph that is re-evaluated should update the elements it created last
time instead of piling up new ones.  :class:`ElementBinder` is the state
table that makes this possible: each call site passes a stable key, the
first evaluation creates the element and later evaluations update it in
place.
"""

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional

from rebarcad.bartypes import BarType
from rebarcad.elements import RebarContainer
from rebarcad.errors import PreconditionError

logger = logging.getLogger(__name__)


class ElementBinder:
    """Key to element table with create-or-update semantics."""

    def __init__(self):
        self._elements: Dict[Hashable, Any] = {}

    def __len__(self):
        return len(self._elements)

    def __contains__(self, key):
        return key in self._elements

    def bind(self, key: Hashable, create: Callable[[], Any],
             update: Optional[Callable[[Any], None]] = None) -> Any:
        """Return the element bound to ``key``.

        If nothing is bound yet, ``create()`` makes the element and it is
        registered under ``key``.  Otherwise ``update(element)`` is called
        on the existing element, which is returned.
        """
        element = self._elements.get(key)
        if element is None:
            element = create()
            self._elements[key] = element
            logger.debug("created element for %r", key)
        elif update is not None:
            update(element)
            logger.debug("updated element for %r", key)
        return element

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._elements.get(key, default)

    def release(self, key: Hashable) -> Any:
        """Forget ``key`` and return the element that was bound to it."""
        return self._elements.pop(key, None)

    def keys(self) -> List[Hashable]:
        return list(self._elements.keys())

    def clear(self) -> None:
        self._elements.clear()


def rebar_by_curves(binder: ElementBinder, key: Hashable, curves: List[list],
                    bar_type: BarType, host_id: Any = None, style="Standard",
                    start_hook: Optional[str] = None, end_hook: Optional[str] = None,
                    start_hook_orientation="Left", end_hook_orientation="Left",
                    normals: Optional[List[list]] = None) -> RebarContainer:
    """Create or update the rebar container bound to ``key``.

    On update the container takes the new host, style and hooks, keeps
    bars whose curves are unchanged and replaces the rest.
    """
    if curves is None:
        raise PreconditionError("Input Curves missing")
    if bar_type is None:
        raise PreconditionError("Rebar Bar Type missing")

    def create():
        container = RebarContainer(bar_type=bar_type, host_id=host_id, style=style,
                                   start_hook=start_hook, end_hook=end_hook,
                                   start_hook_orientation=start_hook_orientation,
                                   end_hook_orientation=end_hook_orientation)
        container.set_from_curves(curves, normals)
        return container

    def update(container):
        fresh = RebarContainer(bar_type=bar_type, host_id=host_id, style=style,
                               start_hook=start_hook, end_hook=end_hook,
                               start_hook_orientation=start_hook_orientation,
                               end_hook_orientation=end_hook_orientation)
        container.bar_type = fresh.bar_type
        container.host_id = fresh.host_id
        container.style = fresh.style
        container.start_hook = fresh.start_hook
        container.end_hook = fresh.end_hook
        container.start_hook_orientation = fresh.start_hook_orientation
        container.end_hook_orientation = fresh.end_hook_orientation
        container.set_from_curves(curves, normals)

    return binder.bind(key, create, update)


__all__ = ["ElementBinder", "rebar_by_curves"]
