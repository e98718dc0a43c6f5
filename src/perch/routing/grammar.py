"""The default Grammar: route tables keyed by router name.

A Grammar is shared by every node of a router tree.  Each node forwards
its route table under its own name (``config``); the root node resolves
whole URLs into instruction trees (``recognize``); anyone can build a
URL from a named route (``generate``).

Recognition recurses through component names: a route that maps a
viewport to component ``"users"`` continues matching the rest of the URL
against the table configured for the router named ``"users"``.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlsplit

from perch.errors import ConfigurationError, UnknownRouteName
from perch.instruction import Instruction
from perch.routing.params import CONVERTERS
from perch.routing.recognizer import Recognizer, parse_path
from perch.routing.route import RouteConfig, RouteMatch

logger = logging.getLogger("perch.routing")

_ROOT_PATH = "/"


def normalise_url(url: str) -> str:
    """Drop query string, fragment and trailing slash: ``/a/b/?x=1`` → ``/a/b``."""
    path = urlsplit(url).path or _ROOT_PATH
    if not path.startswith("/"):
        path = "/" + path
    if path != _ROOT_PATH:
        path = path.rstrip("/") or _ROOT_PATH
    return path


def join_url(prefix: str, child: str | None) -> str:
    """Append a child router's canonical URL to its parent's matched prefix."""
    if not child or child == _ROOT_PATH:
        return prefix
    if prefix == _ROOT_PATH:
        return child
    return prefix.rstrip("/") + child


class Grammar:
    """Route tables for a router tree.

    Usage::

        grammar = Grammar()
        grammar.config("/", [
            {"path": "/", "redirect_to": "/welcome"},
            {"path": "/welcome", "component": "welcome", "name": "welcome"},
        ])
        grammar.recognize("/").canonical_url   # "/welcome"
        grammar.generate("welcome", {})         # "/welcome"
    """

    __slots__ = ("_default_viewport", "_max_redirects", "_named", "_tables")

    def __init__(self, *, default_viewport: str = "default", max_redirects: int = 10) -> None:
        self._default_viewport = default_viewport
        self._max_redirects = max_redirects
        self._tables: dict[str, Recognizer] = {}
        self._named: dict[str, RouteConfig] = {}

    def config(
        self,
        router_name: str,
        mapping: Iterable[RouteConfig | Mapping[str, Any]],
    ) -> None:
        """Add routes to *router_name*'s table.

        Every entry is validated before any is added, so a bad table
        leaves the Grammar untouched.
        """
        if isinstance(mapping, (Mapping, RouteConfig)):
            mapping = [mapping]
        routes = [RouteConfig.coerce(entry, self._default_viewport) for entry in mapping]
        for route in routes:
            parse_path(route.path)

        table = self._tables.setdefault(router_name, Recognizer())
        for route in routes:
            table.add(route)
            if route.name is not None:
                self._named[route.name] = route
        logger.debug("Configured %d route(s) for router %r", len(routes), router_name)

    def has_routes(self, router_name: str) -> bool:
        return router_name in self._tables

    def routes(self, router_name: str) -> list[RouteConfig]:
        table = self._tables.get(router_name)
        return table.routes if table is not None else []

    def recognize(self, url: str, router_name: str = _ROOT_PATH) -> Instruction | None:
        """Resolve *url* against *router_name*'s table.

        Returns the root of an instruction tree whose ``component`` is
        *router_name*, or ``None`` when nothing matches.  Raises
        ``ConfigurationError`` when redirects loop or a component's
        default route leads back to itself.
        """
        path = normalise_url(url)
        return self._recognize(path, router_name, 0, {}, frozenset({(router_name, path)}))

    def _recognize(
        self,
        path: str,
        router_name: str,
        redirects: int,
        inherited: Mapping[str, str],
        visiting: frozenset[tuple[str, str]],
    ) -> Instruction | None:
        table = self._tables.get(router_name)
        if table is None:
            return None

        for match in table.candidates(path):
            if match.route.is_redirect:
                return self._follow_redirect(match, router_name, redirects, inherited, visiting)
            instruction = self._build(match, router_name, inherited, visiting)
            if instruction is not None:
                return instruction
        return None

    def _follow_redirect(
        self,
        match: RouteMatch,
        router_name: str,
        redirects: int,
        inherited: Mapping[str, str],
        visiting: frozenset[tuple[str, str]],
    ) -> Instruction | None:
        if redirects >= self._max_redirects:
            msg = f"Too many redirects while resolving {match.matched!r} in router {router_name!r}"
            raise ConfigurationError(msg)
        target = normalise_url(_fill_path(match.route.redirect_to or _ROOT_PATH, match.path_params))
        logger.debug("Redirect %s -> %s (router %r)", match.matched, target, router_name)
        return self._recognize(target, router_name, redirects + 1, inherited, visiting)

    def _build(
        self,
        match: RouteMatch,
        router_name: str,
        inherited: Mapping[str, str],
        visiting: frozenset[tuple[str, str]],
    ) -> Instruction | None:
        """Turn a route match into an instruction, recognizing child routes.

        Returns ``None`` if the unmatched rest of the URL cannot be
        consumed by the child routers.  *visiting* holds the
        ``(component, path)`` pairs already being resolved above this
        level; meeting one again means the routes can never bottom out.
        """
        params = {**inherited, **match.path_params}
        viewports: dict[str, Instruction] = {}

        for viewport, component in match.route.components.items():
            key = (component, match.rest or _ROOT_PATH)
            if key in visiting:
                msg = (
                    f"Route cycle: component {component!r} is asked to resolve "
                    f"{key[1]!r} again (reached from router {router_name!r})"
                )
                raise ConfigurationError(msg)
            if match.rest:
                child = self._recognize(match.rest, component, 0, params, visiting | {key})
                if child is None:
                    return None
            else:
                child = None
                if self.has_routes(component):
                    child = self._recognize(_ROOT_PATH, component, 0, params, visiting | {key})
                if child is None:
                    child = Instruction(component=component, canonical_url=_ROOT_PATH, params=params)
            viewports[viewport] = child

        child_url = next(
            (child.canonical_url for child in viewports.values() if child.canonical_url != _ROOT_PATH),
            None,
        )
        return Instruction(
            component=router_name,
            viewports=viewports,
            canonical_url=join_url(match.matched, child_url),
            params=params,
            route_name=match.route.name,
        )

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        """Build the URL for the route registered as *name*.

        Raises ``UnknownRouteName`` if no route has that name, and
        ``ConfigurationError`` if a parameter is missing or does not fit
        its converter.
        """
        route = self._named.get(name)
        if route is None:
            raise UnknownRouteName(name)
        return _fill_path(route.path, params or {}, strict=True)


def _fill_path(path: str, params: Mapping[str, Any], *, strict: bool = False) -> str:
    """Substitute ``{param}`` segments of *path* from *params*.

    With ``strict`` every parameter must be present and match its
    converter; otherwise missing parameters keep their placeholder.
    """
    parts: list[str] = []
    for seg in parse_path(path):
        if not seg.is_param:
            parts.append(seg.value)
            continue
        name = seg.param_name or ""
        if name not in params:
            if strict:
                msg = f"Missing parameter {name!r} for route {path!r}"
                raise ConfigurationError(msg)
            parts.append(seg.value)
            continue
        value = str(params[name])
        pattern, _ = CONVERTERS[seg.param_type]
        if strict and not re.fullmatch(pattern, value):
            msg = f"Parameter {name!r}={value!r} does not match {seg.param_type!r} in route {path!r}"
            raise ConfigurationError(msg)
        parts.append(value.strip("/") if seg.param_type == "path" else value)
    return "/" + "/".join(parts)
