"""Navigation pipeline — the ordered steps run for every navigation.

The router hands the pipeline a fully routed instruction tree.  Steps
run one after another; the first step that raises rejects the whole
navigation and the exception reaches ``navigate()``'s caller unchanged.

Default steps::

    can_deactivate   guard walk over the live router tree
    activate         activation walk over the new instruction tree

Steps may be sync or async callables taking the ``RoutedInstruction``::

    async def audit(routed):
        await log_visit(routed.canonical_url)

    pipeline = Pipeline()
    pipeline.add_step(audit)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from perch._internal.invoke import invoke
from perch.activation import activate_ports, can_deactivate_ports

if TYPE_CHECKING:
    from perch.instruction import RoutedInstruction

logger = logging.getLogger("perch.pipeline")

Step = Callable[["RoutedInstruction"], Any]


async def can_deactivate(routed: RoutedInstruction) -> None:
    """Veto the navigation if any currently shown view refuses to leave."""
    await can_deactivate_ports(routed.router, routed)


async def activate(routed: RoutedInstruction) -> None:
    """Show the new instruction tree, parents before children."""
    await activate_ports(routed)


DEFAULT_STEPS: tuple[Step, ...] = (can_deactivate, activate)


class Pipeline:
    """Runs navigation steps in order.

    One pipeline is shared by every node of a router tree.  It keeps no
    per-navigation state, so concurrent ``process()`` calls from
    different routers do not interfere.
    """

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[Step] | None = None) -> None:
        self._steps: list[Step] = list(DEFAULT_STEPS if steps is None else steps)

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps)

    def add_step(self, step: Step) -> None:
        self._steps.append(step)

    async def process(self, routed: RoutedInstruction) -> None:
        """Run every step against *routed*; the first failure propagates."""
        for step in self._steps:
            logger.debug(
                "Step %s for %r",
                getattr(step, "__name__", repr(step)),
                routed.canonical_url,
            )
            await invoke(step, routed)
