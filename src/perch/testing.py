"""Test utilities for perch applications.

``RecordingViewport`` is a view handle that records every lifecycle call
into a log, optionally shared between several viewports so tests can
assert on the order of calls across a whole router tree::

    log: list[ViewportCall] = []
    left = RecordingViewport("left", log=log)
    right = RecordingViewport("right", log=log)
    await router.register_viewport(left, "left")
    ...
    assert [c.label for c in log if c.event == "activate"] == ["left", "right"]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import anyio
from anyio.lowlevel import checkpoint

if TYPE_CHECKING:
    from perch.instruction import RoutedInstruction


@dataclass(frozen=True, slots=True)
class ViewportCall:
    """One recorded lifecycle call.

    ``event`` is ``"activate"``, ``"can_deactivate"`` or ``"deactivate"``;
    ``phase`` is ``"start"`` or ``"end"`` so overlapping calls are visible.
    """

    label: str
    event: str
    phase: str
    component: str | None


@dataclass(slots=True)
class RecordingViewport:
    """A view handle that records its calls.

    Attributes:
        label: Name written into every recorded call.
        allow_deactivate: Result of ``can_deactivate``.
        fail_with: Exception raised from ``activate`` (after recording).
        delay: Seconds to sleep inside ``activate``, to expose ordering.
        log: Shared call log; a private list when not given.
        activated: Routed instructions this view was activated with.
    """

    label: str
    allow_deactivate: bool = True
    fail_with: BaseException | None = None
    delay: float = 0.0
    log: list[ViewportCall] = field(default_factory=list)
    activated: list[RoutedInstruction] = field(default_factory=list)

    async def activate(self, routed: RoutedInstruction) -> None:
        self._record("activate", "start", routed)
        if self.delay:
            await anyio.sleep(self.delay)
        else:
            await checkpoint()
        if self.fail_with is not None:
            self._record("activate", "end", routed)
            raise self.fail_with
        self.activated.append(routed)
        self._record("activate", "end", routed)

    async def can_deactivate(self, old: RoutedInstruction | None) -> bool:
        self._record("can_deactivate", "start", old)
        await checkpoint()
        self._record("can_deactivate", "end", old)
        return self.allow_deactivate

    async def deactivate(self, old: RoutedInstruction) -> None:
        self._record("deactivate", "start", old)
        self._record("deactivate", "end", old)

    def calls(self, event: str | None = None, phase: str = "start") -> list[ViewportCall]:
        """This viewport's recorded calls, filtered by event and phase."""
        return [
            call
            for call in self.log
            if call.label == self.label
            and call.phase == phase
            and (event is None or call.event == event)
        ]

    def _record(self, event: str, phase: str, routed: Any) -> None:
        component = routed.component if routed is not None else None
        self.log.append(ViewportCall(self.label, event, phase, component))
