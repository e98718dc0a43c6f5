"""Tests for perch.config — RouterConfig frozen dataclass."""

import pytest

from perch.config import RouterConfig
from perch.router import RootRouter


class TestRouterConfig:
    def test_defaults(self) -> None:
        cfg = RouterConfig()

        assert cfg.root_name == "/"
        assert cfg.default_viewport == "default"
        assert cfg.renavigate_on_register is True
        assert cfg.renavigate_on_config is True
        assert cfg.max_redirects == 10

    def test_override(self) -> None:
        cfg = RouterConfig(default_viewport="main", max_redirects=2)

        assert cfg.default_viewport == "main"
        assert cfg.max_redirects == 2

    def test_frozen(self) -> None:
        cfg = RouterConfig()

        with pytest.raises(AttributeError):
            cfg.root_name = "app"  # type: ignore[misc]


class TestRouterUsesConfig:
    def test_root_name(self) -> None:
        router = RootRouter(config=RouterConfig(root_name="app"))
        assert router.name == "app"

    def test_children_share_settings(self) -> None:
        cfg = RouterConfig(default_viewport="main")
        router = RootRouter(config=cfg)
        assert router.child_router("a").child_router("b").settings is cfg

    def test_default_viewport_reaches_grammar(self) -> None:
        router = RootRouter(config=RouterConfig(default_viewport="main"))
        router.grammar.config("/", [{"path": "/home", "component": "home"}])

        instruction = router.recognize("/home")
        assert instruction is not None
        assert list(instruction.viewports) == ["main"]
