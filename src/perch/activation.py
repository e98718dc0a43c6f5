"""Ordered asynchronous tree walks.

Every walk has the same shape: visit all slots of one level
concurrently, wait until every visit settles, then move to the next
level.  Three walks are built on that shape:

- ``traverse_instruction`` — the generic primitive over an instruction
  tree; a falsy visitor result aborts the traversal.
- ``can_deactivate_ports`` — the guard walk over the *live* router tree;
  a falsy or raising ``can_deactivate`` vetoes the navigation.
- ``activate_ports`` — the activation walk over the *new* instruction
  tree, crossing into each child's router; parents before children.

Level barrier::

    level N:   activate(left)  activate(right)     <- issued together
               ------------- all settle ---------
    level N+1: activate(left/list)  activate(right/detail)

Levels are walked as a whole frontier, so nothing at depth N+1 starts
until every slot at depth N, in every branch, has settled.

Concurrency within a level uses an anyio task group.  Each sibling's
outcome is captured, so one failing sibling never prevents the others
from being issued; the first failure (in completion order) is raised
once the whole level has settled.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

import anyio

from perch._internal.invoke import invoke
from perch.errors import ActivationFailure, NavigationVetoed, TraversalAborted

if TYPE_CHECKING:
    from perch.instruction import RoutedInstruction
    from perch.router import RouterNode

logger = logging.getLogger("perch.activation")

# visit(router, viewport_name, routed_child) for one slot of one level
Visitor = Callable[["RouterNode", str, "RoutedInstruction"], Awaitable[Any]]


async def settle_level(calls: Sequence[Callable[[], Awaitable[Any]]]) -> list[Any]:
    """Run every call concurrently and wait for all of them to settle.

    Returns the results in call order.  If any call raised, the first
    exception to occur is re-raised after the rest have finished.
    """
    results: list[Any] = [None] * len(calls)
    failures: list[Exception] = []

    async def _run(index: int, call: Callable[[], Awaitable[Any]]) -> None:
        try:
            results[index] = await call()
        except Exception as exc:
            failures.append(exc)

    async with anyio.create_task_group() as tg:
        for index, call in enumerate(calls):
            tg.start_soon(_run, index, call)

    if failures:
        raise failures[0]
    return results


async def walk_instruction(routed: RoutedInstruction, visit: Visitor) -> None:
    """Visit an instruction tree level by level.

    ``visit`` receives the router that owns the level being visited,
    the viewport name and the routed child for that viewport.
    """
    level = [routed]
    depth = 0
    while level:
        calls = [
            partial(visit, parent.router, name, child)
            for parent in level
            for name, child in parent.viewports.items()
        ]
        if calls:
            logger.debug("Visiting %d slot(s) at depth %d", len(calls), depth)
        await settle_level(calls)
        level = [child for parent in level for child in parent.viewports.values()]
        depth += 1


async def traverse_instruction(
    routed: RoutedInstruction,
    fn: Callable[[RoutedInstruction, str], Any],
) -> None:
    """Apply ``fn(child, viewport_name)`` level by level over the tree.

    A falsy result raises ``TraversalAborted``; an exception from *fn*
    propagates unchanged.  Either way deeper levels are never visited.
    """

    async def _visit(router: RouterNode, name: str, child: RoutedInstruction) -> None:
        if not await invoke(fn, child, name):
            raise TraversalAborted(viewport=name)

    await walk_instruction(routed, _visit)


async def activate_ports(routed: RoutedInstruction) -> None:
    """Activate every registered view in the tree, parents before children.

    Slots without a registered view are skipped; the walk still
    descends so that already-registered nested views receive content.
    """
    await walk_instruction(routed, _activate_port)


async def _activate_port(router: RouterNode, name: str, child: RoutedInstruction) -> None:
    ports = router.ports
    handle = ports.get(name)
    if handle is None:
        logger.debug("Router %r has no view for %r; skipping activation", router.name, name)
        return

    previous = ports.active(name)
    deactivate = getattr(handle, "deactivate", None)
    try:
        if previous is not None and deactivate is not None:
            await invoke(deactivate, previous)
        await invoke(handle.activate, child)
    except Exception as exc:
        raise ActivationFailure(viewport=name, component=child.component) from exc

    ports.mark_active(name, child)
    logger.debug("Router %r activated %r in viewport %r", router.name, child.component, name)


async def can_deactivate_ports(router: RouterNode, routed: RoutedInstruction | None = None) -> None:
    """Ask every currently registered view whether it may be left.

    At the top level only viewports named by *routed* are asked (all of
    them when *routed* is ``None``); below that the walk follows the
    live child routers and asks every registered view.  Raises
    ``NavigationVetoed`` on the first refusal, before the next level.
    """
    if routed is None:
        names = router.ports.names()
    else:
        names = [name for name in routed.viewports if name in router.ports]

    calls = [partial(_check_port, router, name) for name in names]
    level = list(router.children.values())
    while True:
        await settle_level(calls)
        if not level:
            return
        calls = [partial(_check_port, node, name) for node in level for name in node.ports.names()]
        level = [child for node in level for child in node.children.values()]


async def _check_port(router: RouterNode, name: str) -> bool:
    ports = router.ports
    handle = ports.get(name)
    old = ports.active(name)
    component = old.component if old is not None else None
    can_deactivate = getattr(handle, "can_deactivate", None)
    if can_deactivate is None:
        return True
    try:
        allowed = await invoke(can_deactivate, old)
    except Exception as exc:
        raise NavigationVetoed(viewport=name, component=component) from exc
    if not allowed:
        raise NavigationVetoed(viewport=name, component=component)
    return True
