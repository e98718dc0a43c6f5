"""View handles and the per-router viewport registry.

A view handle is whatever the host application registers for a named
slot.  It needs an ``activate`` method; ``can_deactivate`` and
``deactivate`` are optional.  Each may be sync or async.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from perch.instruction import RoutedInstruction


@runtime_checkable
class ViewportHandle(Protocol):
    """The capability a view must offer to be registered.

    Optional capabilities, looked up with ``getattr``::

        can_deactivate(old: RoutedInstruction | None) -> bool | Awaitable[bool]
        deactivate(old: RoutedInstruction) -> None | Awaitable[None]
    """

    def activate(self, routed: RoutedInstruction) -> Any: ...


class ViewportRegistry:
    """Registered view handles of one router node, by viewport name.

    Also remembers which routed instruction each slot currently shows,
    so the guard walk can hand views their *old* instruction.
    """

    __slots__ = ("_active", "_handles")

    def __init__(self) -> None:
        self._handles: dict[str, Any] = {}
        self._active: dict[str, RoutedInstruction] = {}

    def register(self, name: str, handle: Any) -> Any | None:
        """Store *handle* under *name*, returning the handle it replaced.

        A replaced handle's active instruction is forgotten: the new view
        has not shown anything yet.
        """
        previous = self._handles.get(name)
        self._handles[name] = handle
        if previous is not None and previous is not handle:
            self._active.pop(name, None)
        return previous

    def get(self, name: str) -> Any | None:
        return self._handles.get(name)

    def active(self, name: str) -> RoutedInstruction | None:
        return self._active.get(name)

    def mark_active(self, name: str, routed: RoutedInstruction) -> None:
        self._active[name] = routed

    def names(self) -> list[str]:
        return list(self._handles)

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handles))

    def __len__(self) -> int:
        return len(self._handles)
