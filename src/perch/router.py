"""Router nodes — one per nesting level, forming a tree.

The root router is created once with a Grammar and a Pipeline.  Child
routers are created on first use by component name, share the root's
Grammar and Pipeline, and live as long as their parent.

Navigation lifecycle on the node ``navigate()`` is called on::

    navigate(url)
      ├── in flight, or url == last_navigated_url  → no-op
      ├── grammar.recognize(url)                   → NoRouteMatch
      ├── navigating = True
      ├── make_descendant_routers(instruction)     (sync, whole tree)
      ├── pipeline.process(routed)                 → veto / failure propagates
      └── navigating = False, remember canonical URL
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from perch import activation
from perch.config import RouterConfig
from perch.errors import NavigationVetoed, NoRouteMatch
from perch.instruction import Instruction, RoutedInstruction
from perch.pipeline import Pipeline
from perch.routing.grammar import Grammar
from perch.routing.route import RouteConfig
from perch.viewports import ViewportRegistry

logger = logging.getLogger("perch.router")


class RouterNode:
    """Navigation state machine for one nesting level.

    Not constructed directly by applications: use ``RootRouter`` for the
    root and ``child_router()`` for everything below it.

    Attributes:
        name: Slot this node governs; also its Grammar table key.
        parent: The owning router, ``None`` for the root.
        children: Child routers by component name, created on demand.
        ports: View handles registered on this node.
        grammar: Route tables, shared by the whole tree.
        pipeline: Navigation steps, shared by the whole tree.
        settings: Router configuration, shared by the whole tree.
        last_navigated_url: Canonical URL of the last successful navigation.
        previous_url: URL passed to the last successful navigation.
        last_navigation_attempt: URL passed to the last navigation attempt.
    """

    __slots__ = (
        "_navigating",
        "children",
        "grammar",
        "last_navigated_url",
        "last_navigation_attempt",
        "name",
        "parent",
        "pipeline",
        "ports",
        "previous_url",
        "settings",
    )

    def __init__(
        self,
        grammar: Grammar,
        pipeline: Pipeline,
        *,
        name: str,
        parent: RouterNode | None = None,
        settings: RouterConfig | None = None,
    ) -> None:
        self.name = name
        self.parent = parent
        self.grammar = grammar
        self.pipeline = pipeline
        self.settings = settings or RouterConfig()
        self.children: dict[str, RouterNode] = {}
        self.ports = ViewportRegistry()
        self._navigating = False
        self.last_navigated_url: str | None = None
        self.previous_url: str | None = None
        self.last_navigation_attempt: str | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @property
    def navigating(self) -> bool:
        """True strictly between navigation start and settlement."""
        return self._navigating

    @property
    def root(self) -> RouterNode:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    # -- Tree building --

    def child_router(self, name: str) -> RouterNode:
        """Return the child router for *name*, creating it on first use."""
        child = self.children.get(name)
        if child is None:
            child = RouterNode(
                self.grammar,
                self.pipeline,
                name=name,
                parent=self,
                settings=self.settings,
            )
            self.children[name] = child
            logger.debug("Router %r created child router %r", self.name, name)
        return child

    def make_descendant_routers(self, instruction: Instruction) -> RoutedInstruction:
        """Bind *instruction* to this router and every child to its own router.

        Runs synchronously over the whole tree.  Child routers are keyed by
        the child instruction's component, not by viewport name.
        """
        return RoutedInstruction(
            instruction=instruction,
            router=self,
            viewports={
                viewport: self.child_router(child.component).make_descendant_routers(child)
                for viewport, child in instruction.viewports.items()
            },
        )

    # -- Navigation --

    def recognize(self, url: str) -> Instruction | None:
        return self.grammar.recognize(url, self.name)

    async def navigate(self, url: str) -> str | None:
        """Navigate to *url* and return its canonical URL.

        Returns without doing anything while a navigation is in flight
        (``None``) or when *url* is the last canonical URL navigated to
        (that URL).  Raises ``NoRouteMatch`` if the Grammar cannot resolve
        *url*; any pipeline failure propagates unchanged.  ``navigating``
        is always cleared again.
        """
        if self._navigating:
            logger.debug("Router %r is navigating; ignoring %r", self.name, url)
            return None
        if url == self.last_navigated_url:
            logger.debug("Router %r is already at %r", self.name, url)
            return url
        return await self._navigate(url)

    async def _navigate(self, url: str) -> str | None:
        self.last_navigation_attempt = url
        instruction = self.recognize(url)
        if instruction is None:
            raise NoRouteMatch(url)

        self._navigating = True
        logger.debug("Router %r navigating to %r", self.name, url)
        try:
            routed = self.make_descendant_routers(instruction)
            await self.pipeline.process(routed)
        except NavigationVetoed as exc:
            logger.warning("Navigation to %r vetoed: %s", url, exc)
            raise
        finally:
            self._navigating = False

        self.last_navigated_url = instruction.canonical_url
        self.previous_url = url
        logger.debug("Router %r navigated to %r", self.name, instruction.canonical_url)
        return instruction.canonical_url

    async def renavigate(self) -> str | None:
        """Replay the last destination into the router tree.

        Prefers the last successful URL over the last attempted one, and
        replays it even when it is the current URL, so views registered
        after the fact receive content.  A router with no destination of
        its own asks its parent.  Does nothing while navigating.
        """
        if self._navigating:
            return None
        destination = self.previous_url or self.last_navigation_attempt
        if destination is None:
            if self.parent is not None:
                return await self.parent.renavigate()
            return None
        logger.debug("Router %r renavigating to %r", self.name, destination)
        return await self._navigate(destination)

    # -- Viewports and configuration --

    async def register_viewport(self, view: Any, name: str | None = None) -> str | None:
        """Register *view* under *name* (the default viewport if omitted).

        Replaces any view already registered under that name, then
        renavigates so the view receives the current content.
        """
        name = name or self.settings.default_viewport
        self.ports.register(name, view)
        logger.debug("Router %r registered viewport %r", self.name, name)
        if not self.settings.renavigate_on_register:
            return None
        return await self.renavigate()

    async def config(self, mapping: Iterable[RouteConfig | Mapping[str, Any]]) -> str | None:
        """Add routes to this router's table, then renavigate."""
        self.grammar.config(self.name, mapping)
        if not self.settings.renavigate_on_config:
            return None
        return await self.renavigate()

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        return self.grammar.generate(name, params)

    # -- Tree walks --

    async def can_deactivate_ports(self, routed: RoutedInstruction | None = None) -> None:
        await activation.can_deactivate_ports(self, routed)

    async def activate_ports(self, routed: RoutedInstruction) -> None:
        await activation.activate_ports(routed)

    async def traverse_instruction(
        self,
        routed: RoutedInstruction,
        fn: Callable[[RoutedInstruction, str], Any],
    ) -> None:
        await activation.traverse_instruction(routed, fn)


class RootRouter(RouterNode):
    """Entry point of a router tree.

    Usage::

        router = RootRouter()
        await router.config([
            {"path": "/", "redirect_to": "/welcome"},
            {"path": "/welcome", "component": "welcome"},
        ])
        await router.navigate("/")              # "/welcome"
        await router.register_viewport(view)    # view.activate(...) is called
    """

    __slots__ = ()

    def __init__(
        self,
        grammar: Grammar | None = None,
        pipeline: Pipeline | None = None,
        *,
        config: RouterConfig | None = None,
    ) -> None:
        settings = config or RouterConfig()
        if grammar is None:
            grammar = Grammar(
                default_viewport=settings.default_viewport,
                max_redirects=settings.max_redirects,
            )
        super().__init__(
            grammar,
            pipeline or Pipeline(),
            name=settings.root_name,
            settings=settings,
        )
