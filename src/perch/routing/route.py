"""RouteConfig, PathSegment and RouteMatch frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from perch.errors import ConfigurationError

# Keys accepted in dict route entries, with their RouteConfig field
_ALIASES = {
    "path": "path",
    "component": "component",
    "components": "components",
    "redirect_to": "redirect_to",
    "redirectTo": "redirect_to",
    "name": "name",
    "as": "name",
}


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """A frozen route table entry.

    Exactly one target is set: ``components`` (viewport name → component)
    or ``redirect_to``.  Created by ``Grammar.config()`` from dicts such as::

        {"path": "/welcome", "component": "welcome"}
        {"path": "/users/posts", "components": {"left": "users", "right": "posts"}}
        {"path": "/", "redirect_to": "/welcome"}
    """

    path: str
    components: Mapping[str, str] = field(default_factory=dict)
    redirect_to: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.components, MappingProxyType):
            object.__setattr__(self, "components", MappingProxyType(dict(self.components)))

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None

    @classmethod
    def coerce(cls, entry: "RouteConfig | Mapping[str, Any]", default_viewport: str) -> "RouteConfig":
        """Build a validated RouteConfig from a dict entry (or pass one through).

        Raises ``ConfigurationError`` for unknown keys, a missing path, or
        anything other than exactly one target.
        """
        if isinstance(entry, RouteConfig):
            route = entry
        elif isinstance(entry, Mapping):
            route = cls._from_mapping(entry, default_viewport)
        else:
            msg = f"Route entries must be mappings or RouteConfig, got {type(entry).__name__}"
            raise ConfigurationError(msg)
        route._validate()
        return route

    @classmethod
    def _from_mapping(cls, entry: Mapping[str, Any], default_viewport: str) -> "RouteConfig":
        values: dict[str, Any] = {}
        for key, value in entry.items():
            target = _ALIASES.get(key)
            if target is None:
                msg = f"Unknown route key {key!r} in {dict(entry)!r}"
                raise ConfigurationError(msg)
            if target in values:
                msg = f"Route key {key!r} given twice in {dict(entry)!r}"
                raise ConfigurationError(msg)
            values[target] = value

        if "path" not in values:
            msg = f"Route entry is missing 'path': {dict(entry)!r}"
            raise ConfigurationError(msg)

        component = values.pop("component", None)
        if component is not None:
            if "components" in values:
                msg = f"Route {values['path']!r} sets both 'component' and 'components'"
                raise ConfigurationError(msg)
            values["components"] = {default_viewport: component}
        return cls(**values)

    def _validate(self) -> None:
        if not isinstance(self.path, str) or not self.path.startswith("/"):
            msg = f"Route path must be a string starting with '/', got {self.path!r}"
            raise ConfigurationError(msg)
        if bool(self.components) == self.is_redirect:
            msg = (
                f"Route {self.path!r} must have exactly one of "
                f"'component', 'components' or 'redirect_to'"
            )
            raise ConfigurationError(msg)
        for viewport, component in self.components.items():
            if not isinstance(viewport, str) or not isinstance(component, str) or not component:
                msg = f"Route {self.path!r} maps viewport {viewport!r} to invalid component {component!r}"
                raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``matched`` is the URL prefix the route consumed; ``rest`` is what is
    left for child routers (``""`` for an exact match).
    """

    route: RouteConfig
    path_params: dict[str, str]
    matched: str
    rest: str = ""
