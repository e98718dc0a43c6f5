"""Tests for perch.routing.grammar — recognize, redirects, child routes, generate."""

import pytest

from perch.errors import ConfigurationError, UnknownRouteName
from perch.routing.grammar import Grammar, join_url, normalise_url


@pytest.fixture
def grammar() -> Grammar:
    g = Grammar()
    g.config(
        "/",
        [
            {"path": "/", "redirect_to": "/welcome"},
            {"path": "/welcome", "component": "welcome", "name": "welcome"},
            {"path": "/users/posts", "components": {"left": "users", "right": "posts"}},
            {"path": "/posts/users", "components": {"left": "posts", "right": "users"}},
            {"path": "/inbox", "component": "inbox", "name": "inbox"},
        ],
    )
    g.config(
        "inbox",
        [
            {"path": "/", "redirect_to": "/unread"},
            {"path": "/unread", "component": "unread"},
            {"path": "/message/{id:int}", "component": "message", "name": "message"},
        ],
    )
    return g


class TestUrlHelpers:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("/", "/"),
            ("", "/"),
            ("/a/b/", "/a/b"),
            ("/a?x=1#top", "/a"),
            ("a/b", "/a/b"),
        ],
    )
    def test_normalise(self, url: str, expected: str) -> None:
        assert normalise_url(url) == expected

    def test_join(self) -> None:
        assert join_url("/", "/welcome") == "/welcome"
        assert join_url("/inbox", "/unread") == "/inbox/unread"
        assert join_url("/inbox", "/") == "/inbox"
        assert join_url("/inbox", None) == "/inbox"


class TestRecognize:
    def test_single_component(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/welcome")

        assert instruction is not None
        assert instruction.component == "/"
        assert instruction.canonical_url == "/welcome"
        assert list(instruction.viewports) == ["default"]
        assert instruction.viewports["default"].component == "welcome"
        assert instruction.route_name == "welcome"

    def test_redirect_rewrites_canonical_url(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/")

        assert instruction is not None
        assert instruction.canonical_url == "/welcome"
        assert instruction.viewports["default"].component == "welcome"

    def test_sibling_viewports(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/users/posts")

        assert instruction is not None
        assert {k: v.component for k, v in instruction.viewports.items()} == {
            "left": "users",
            "right": "posts",
        }
        assert instruction.canonical_url == "/users/posts"

    def test_no_match(self, grammar: Grammar) -> None:
        assert grammar.recognize("/nowhere") is None

    def test_unknown_router(self, grammar: Grammar) -> None:
        assert grammar.recognize("/welcome", "missing") is None

    def test_query_string_ignored(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/welcome?ref=mail")
        assert instruction is not None
        assert instruction.canonical_url == "/welcome"

    def test_child_routes(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/inbox/message/7")

        assert instruction is not None
        inbox = instruction.viewports["default"]
        assert inbox.component == "inbox"
        message = inbox.viewports["default"]
        assert message.component == "message"
        assert message.params["id"] == "7"
        assert instruction.canonical_url == "/inbox/message/7"

    def test_child_default_route_follows_redirect(self, grammar: Grammar) -> None:
        instruction = grammar.recognize("/inbox")

        assert instruction is not None
        inbox = instruction.viewports["default"]
        assert inbox.viewports["default"].component == "unread"
        assert instruction.canonical_url == "/inbox/unread"

    def test_rest_not_consumed_by_children(self, grammar: Grammar) -> None:
        assert grammar.recognize("/welcome/extra") is None
        assert grammar.recognize("/inbox/nope") is None

    def test_redirect_loop(self) -> None:
        g = Grammar(max_redirects=3)
        g.config("/", [{"path": "/a", "redirect_to": "/b"}, {"path": "/b", "redirect_to": "/a"}])

        with pytest.raises(ConfigurationError, match="redirects"):
            g.recognize("/a")

    def test_redirect_carries_params(self) -> None:
        g = Grammar()
        g.config(
            "/",
            [
                {"path": "/u/{id}", "redirect_to": "/users/{id}"},
                {"path": "/users/{id}", "component": "user"},
            ],
        )
        instruction = g.recognize("/u/ada")

        assert instruction is not None
        assert instruction.canonical_url == "/users/ada"
        assert instruction.params == {"id": "ada"}


class TestRouteCycles:
    def test_component_default_route_names_itself(self) -> None:
        g = Grammar()
        g.config("/", [{"path": "/shell", "component": "shell"}])
        g.config("shell", [{"path": "/", "component": "shell"}])

        with pytest.raises(ConfigurationError, match="Route cycle.*'shell'"):
            g.recognize("/shell")

    def test_mutual_default_routes(self) -> None:
        g = Grammar()
        g.config("/", [{"path": "/app", "component": "a"}])
        g.config("a", [{"path": "/", "component": "b"}])
        g.config("b", [{"path": "/", "component": "a"}])

        with pytest.raises(ConfigurationError, match="Route cycle"):
            g.recognize("/app")

    def test_cycle_through_child_redirect(self) -> None:
        g = Grammar()
        g.config("/", [{"path": "/shell", "component": "shell"}])
        g.config(
            "shell",
            [
                {"path": "/", "redirect_to": "/home"},
                {"path": "/home", "component": "shell"},
            ],
        )

        # "/home" matches exactly, so the nested shell starts over at "/"
        with pytest.raises(ConfigurationError, match="Route cycle"):
            g.recognize("/shell")

    def test_recursive_component_consuming_path(self) -> None:
        g = Grammar()
        g.config("/", [{"path": "/files", "component": "folder"}])
        g.config("folder", [{"path": "/{name}", "component": "folder"}])

        instruction = g.recognize("/files/a/b")

        assert instruction is not None
        assert instruction.canonical_url == "/files/a/b"
        outer = instruction.viewports["default"]
        inner = outer.viewports["default"]
        assert outer.component == "folder"
        assert outer.params == {"name": "a"}
        assert inner.params == {"name": "b"}
        assert inner.canonical_url == "/b"


class TestConfig:
    def test_invalid_table_leaves_grammar_untouched(self) -> None:
        g = Grammar()
        with pytest.raises(ConfigurationError):
            g.config("/", [{"path": "/ok", "component": "ok"}, {"path": "/bad/<x>", "component": "x"}])

        assert g.has_routes("/") is False
        assert g.recognize("/ok") is None

    def test_config_adds_to_table(self) -> None:
        g = Grammar()
        g.config("/", [{"path": "/a", "component": "a"}])
        g.config("/", {"path": "/b", "component": "b"})

        assert [r.path for r in g.routes("/")] == ["/a", "/b"]


class TestGenerate:
    def test_static(self, grammar: Grammar) -> None:
        assert grammar.generate("welcome", {}) == "/welcome"

    def test_params(self, grammar: Grammar) -> None:
        assert grammar.generate("message", {"id": 12}) == "/message/12"

    def test_unknown_name(self, grammar: Grammar) -> None:
        with pytest.raises(UnknownRouteName):
            grammar.generate("nope", {})

    def test_missing_param(self, grammar: Grammar) -> None:
        with pytest.raises(ConfigurationError, match="Missing parameter 'id'"):
            grammar.generate("message")

    def test_param_type_checked(self, grammar: Grammar) -> None:
        with pytest.raises(ConfigurationError, match="does not match"):
            grammar.generate("message", {"id": "abc"})
