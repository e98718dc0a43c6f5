"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, shared by
every node of a router tree.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_viewport="main", max_redirects=3)
    """

    # Name of the root router node; also the Grammar key for its route table
    root_name: str = "/"

    # Viewport name used by register_viewport() and by ``component`` routes
    default_viewport: str = "default"

    # Replay the last destination when a view registers late
    renavigate_on_register: bool = True

    # Replay the last destination after config() adds routes
    renavigate_on_config: bool = True

    # Redirect chain limit for the default Grammar
    max_redirects: int = 10
