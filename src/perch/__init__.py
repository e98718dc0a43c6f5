"""Perch — hierarchical navigation for nested views.

Resolves a URL into a tree of instructions, one per nested viewport,
and drives an ordered, asynchronous lifecycle across a tree of routers:
ask current views whether they may be left, then activate the new views
level by level, parents before children.

Basic usage::

    from perch import RootRouter

    router = RootRouter()
    await router.config([
        {"path": "/", "redirect_to": "/welcome"},
        {"path": "/welcome", "component": "welcome"},
        {"path": "/users/posts", "components": {"left": "users", "right": "posts"}},
    ])
    await router.register_viewport(view)
    await router.navigate("/")   # "/welcome"
"""

from importlib import import_module

__version__ = "0.1.0"

# Public name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "ActivationFailure": "perch.errors",
    "ConfigurationError": "perch.errors",
    "Grammar": "perch.routing.grammar",
    "Instruction": "perch.instruction",
    "NavigationError": "perch.errors",
    "NavigationVetoed": "perch.errors",
    "NoRouteMatch": "perch.errors",
    "PerchError": "perch.errors",
    "Pipeline": "perch.pipeline",
    "RootRouter": "perch.router",
    "RouteConfig": "perch.routing.route",
    "RoutedInstruction": "perch.instruction",
    "RouterConfig": "perch.config",
    "RouterNode": "perch.router",
    "TraversalAborted": "perch.errors",
    "UnknownRouteName": "perch.errors",
    "ViewportHandle": "perch.viewports",
}

__all__ = sorted(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(import_module(module_name), name)
