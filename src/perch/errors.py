"""Perch exception hierarchy.

Shared across the Grammar, Pipeline and Router Node tree so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a route table or a generate() call is invalid.

    Typically raised by ``Grammar.config()`` at startup.
    """


class UnknownRouteName(PerchError, KeyError):  # noqa: N818 — mirrors KeyError
    """``Grammar.generate()`` was asked for a route name it never saw."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No route named {self.name!r}"


class NavigationError(PerchError):
    """Base for failures that reject a navigation."""


@dataclass(slots=True, eq=False)
class NoRouteMatch(NavigationError):  # noqa: N818 — conventional name in routers
    """The Grammar could not resolve the URL. No router state changed."""

    url: str

    def __str__(self) -> str:
        return f"No route matches {self.url!r}"


@dataclass(slots=True, eq=False)
class NavigationVetoed(NavigationError):  # noqa: N818 — conventional name in routers
    """A view refused to be deactivated.

    ``component`` is the component currently shown in the vetoing slot,
    or ``None`` when the slot was empty.
    """

    viewport: str
    component: str | None = None

    def __str__(self) -> str:
        if self.component:
            return f"Viewport {self.viewport!r} ({self.component}) vetoed navigation"
        return f"Viewport {self.viewport!r} vetoed navigation"


@dataclass(slots=True, eq=False)
class TraversalAborted(NavigationError):  # noqa: N818
    """A ``traverse_instruction`` visitor returned a falsy result."""

    viewport: str

    def __str__(self) -> str:
        return f"Traversal aborted at viewport {self.viewport!r}"


@dataclass(slots=True, eq=False)
class ActivationFailure(NavigationError):
    """A view handle raised while being activated.

    The original exception is preserved as ``__cause__``.
    """

    viewport: str
    component: str

    def __str__(self) -> str:
        detail = f"Activating {self.component!r} in viewport {self.viewport!r} failed"
        if self.__cause__ is not None:
            return f"{detail}: {self.__cause__!r}"
        return detail
