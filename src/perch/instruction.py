"""Instruction trees.

An ``Instruction`` is the Grammar's answer for one nesting level: which
component to show and, keyed by viewport name, the instructions for the
nested regions inside it.  Instructions are frozen and built fresh for
every navigation attempt.

Router ownership is not stored on the instruction.  It lives in a
parallel ``RoutedInstruction`` tree built by
``RouterNode.make_descendant_routers()``, so the same instruction value
can be walked concurrently without anyone mutating it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.router import RouterNode


@dataclass(frozen=True, slots=True)
class Instruction:
    """A resolved routing decision for one nesting level.

    Attributes:
        component: Component to activate in this slot.  For the root of a
            tree this is the name of the router that recognized the URL.
        viewports: Child instructions keyed by viewport name.  The key set
            comes from the Grammar alone.
        canonical_url: Normalised URL of the whole subtree, set once every
            level recognized successfully.
        params: Path parameters captured at this level.
        route_name: Name of the matched route, if it had one.
    """

    component: str
    viewports: Mapping[str, Instruction] = field(default_factory=dict)
    canonical_url: str | None = None
    params: Mapping[str, str] = field(default_factory=dict)
    route_name: str | None = None

    def __post_init__(self) -> None:
        # Freeze caller-supplied dicts so the tree stays immutable
        if not isinstance(self.viewports, MappingProxyType):
            object.__setattr__(self, "viewports", MappingProxyType(dict(self.viewports)))
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True, slots=True)
class RoutedInstruction:
    """An ``Instruction`` bound to the Router Node that owns its slot.

    Mirrors the instruction tree one-to-one: ``viewports`` has exactly the
    keys of ``instruction.viewports``.
    """

    instruction: Instruction
    router: RouterNode
    viewports: Mapping[str, RoutedInstruction] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.viewports, MappingProxyType):
            object.__setattr__(self, "viewports", MappingProxyType(dict(self.viewports)))

    @property
    def component(self) -> str:
        return self.instruction.component

    @property
    def canonical_url(self) -> str | None:
        return self.instruction.canonical_url

    @property
    def params(self) -> Mapping[str, str]:
        return self.instruction.params

    def __repr__(self) -> str:
        return (
            f"RoutedInstruction(component={self.component!r}, "
            f"router={self.router.name!r}, viewports={list(self.viewports)!r})"
        )
