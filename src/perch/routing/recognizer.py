"""Trie-based route table for a single router.

Routes are added while the router is configured.  Matching prefers an
exact match; failing that, the longest route that is a prefix of the
URL matches and hands the remainder to child routers.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from perch.errors import ConfigurationError
from perch.routing.params import CONVERTERS
from perch.routing.route import PathSegment, RouteConfig, RouteMatch

# Flask/werkzeug style <param> segments
_ANGLE_PARAM_RE = re.compile(r"<[^>]*>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]
    """
    if _ANGLE_PARAM_RE.search(path):
        msg = f"Route path {path!r} uses <param> syntax; perch expects {{param}}"
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown converter {param_type!r} in route path {path!r}"
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def split_url(path: str) -> list[str]:
    return [p for p in path.strip("/").split("/") if p]


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("catch_all", "children", "param_child", "route")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all route (path converter)
        self.catch_all: _CatchAllEdge | None = None
        # Route ending at this node
        self.route: RouteConfig | None = None


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge — consumes remaining path."""

    param_name: str
    route: RouteConfig


class Recognizer:
    """Route table for one router, compiled into a trie.

    Usage::

        recognizer = Recognizer()
        recognizer.add(RouteConfig("/users/{id:int}", components={"default": "user"}))
        match = next(recognizer.candidates("/users/42"), None)
    """

    __slots__ = ("_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: dict[str, RouteConfig] = {}

    def add(self, route: RouteConfig) -> None:
        """Add a route.  A route with an already-known path replaces it."""
        segments = parse_path(route.path)
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path", route=route)
                self._routes[route.path] = route
                return

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                elif (
                    node.param_child.param_name != seg.param_name
                    or node.param_child.param_type != seg.param_type
                ):
                    msg = (
                        f"Route {route.path!r} conflicts with an existing parameter "
                        f"{{{node.param_child.param_name}:{node.param_child.param_type}}}"
                    )
                    raise ConfigurationError(msg)
                node = node.param_child.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        node.route = route
        self._routes[route.path] = route

    @property
    def routes(self) -> list[RouteConfig]:
        """Return all registered routes, in registration order."""
        return list(self._routes.values())

    def candidates(self, path: str) -> Iterator[RouteMatch]:
        """Yield matches for *path*, best first.

        The exact match (if any) comes first, then prefix matches from the
        longest prefix down to ``/``.  Redirects only ever match exactly;
        a prefix match needs a route that can own child routes.
        """
        parts = split_url(path)

        exact = self._match_node(self._root, parts, 0, {})
        if exact is not None:
            route, params = exact
            yield RouteMatch(route=route, path_params=params, matched=_join_parts(parts))

        for cut in range(len(parts) - 1, -1, -1):
            prefix = self._match_node(self._root, parts[:cut], 0, {})
            if prefix is None:
                continue
            route, params = prefix
            if route.is_redirect:
                continue
            yield RouteMatch(
                route=route,
                path_params=params,
                matched=_join_parts(parts[:cut]),
                rest=_join_parts(parts[cut:]),
            )

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[RouteConfig, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        # All parts consumed — return this node's route
        if index == len(parts):
            if node.route is not None:
                return node.route, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter child
        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Try catch-all
        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.route, {**params, node.catch_all.param_name: remaining}

        return None


def _join_parts(parts: list[str]) -> str:
    return "/" + "/".join(parts)
