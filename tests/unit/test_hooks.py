"""
Unit tests for hook chains, the event bus and URL generation.
"""

from accountkit.domain.hooks import EventBus, HookChain, UrlBuilder, add_query_elements


class TestHookChain:
    """Tests for ordered value-filtering pipelines."""

    def test_no_handlers_returns_value(self) -> None:
        assert HookChain().trigger("anything", {}, "value") == "value"

    def test_handler_replaces_value(self) -> None:
        hooks = HookChain()
        hooks.register("name", lambda params, value: value + "-changed")
        assert hooks.trigger("name", {}, "value") == "value-changed"

    def test_none_return_keeps_value(self) -> None:
        hooks = HookChain()
        hooks.register("name", lambda params, value: None)
        assert hooks.trigger("name", {}, "value") == "value"

    def test_handlers_run_by_priority_then_registration(self) -> None:
        hooks = HookChain()
        hooks.register("name", lambda p, v: v + ["late"], priority=900)
        hooks.register("name", lambda p, v: v + ["first"], priority=100)
        hooks.register("name", lambda p, v: v + ["default-a"])
        hooks.register("name", lambda p, v: v + ["default-b"])

        assert hooks.trigger("name", {}, []) == ["first", "default-a", "default-b", "late"]

    def test_handlers_see_params(self) -> None:
        hooks = HookChain()
        hooks.register("name", lambda params, value: params["suffix"])
        assert hooks.trigger("name", {"suffix": "from-params"}, "value") == "from-params"

    def test_unregister(self) -> None:
        hooks = HookChain()

        def handler(params, value):
            return "changed"

        hooks.register("name", handler)
        assert hooks.has_handlers("name")
        assert hooks.unregister("name", handler) is True
        assert not hooks.has_handlers("name")
        assert hooks.unregister("name", handler) is False
        assert hooks.trigger("name", {}, "value") == "value"


class TestEventBus:
    """Tests for event dispatch."""

    def test_emit_calls_handlers_in_order(self) -> None:
        bus = EventBus()
        calls = []
        bus.on("ban", lambda obj: calls.append(("second", obj)), priority=600)
        bus.on("ban", lambda obj: calls.append(("first", obj)))

        bus.emit("ban", "user")

        assert calls == [("first", "user"), ("second", "user")]

    def test_emit_without_listeners(self) -> None:
        EventBus().emit("nothing", object())

    def test_events_are_isolated(self) -> None:
        bus = EventBus()
        calls = []
        bus.on("ban", calls.append)
        bus.emit("unban", "user")
        assert calls == []

    def test_bus_owns_hook_chain(self) -> None:
        hooks = HookChain()
        assert EventBus(hooks).hooks is hooks
        assert isinstance(EventBus().hooks, HookChain)


class TestUrlBuilder:
    """Tests for URL generation."""

    def test_registration_url(self) -> None:
        urls = UrlBuilder("https://example.com/")
        assert urls.registration_url() == "https://example.com/register"

    def test_registration_url_with_query_and_fragment(self) -> None:
        urls = UrlBuilder("https://example.com")
        url = urls.registration_url({"invitecode": "abc", "inviter": "alice"}, "#form")
        assert url == "https://example.com/register?invitecode=abc&inviter=alice#form"

    def test_login_url(self) -> None:
        urls = UrlBuilder("https://example.com")
        assert urls.login_url(fragment="#login-dropdown-box") == (
            "https://example.com/login#login-dropdown-box"
        )

    def test_hook_can_rewrite_registration_url(self) -> None:
        hooks = HookChain()
        seen = {}

        def rewrite(params, url):
            seen.update(params)
            return "https://sso.example.com/signup?" + "code=" + params["query"]["invitecode"]

        hooks.register("registration_url", rewrite)
        urls = UrlBuilder("https://example.com", hooks)

        assert urls.registration_url({"invitecode": "abc"}) == (
            "https://sso.example.com/signup?code=abc"
        )
        assert seen["query"] == {"invitecode": "abc"}

    def test_login_hook_does_not_affect_registration(self) -> None:
        hooks = HookChain()
        hooks.register("login_url", lambda params, url: "https://sso.example.com/login")
        urls = UrlBuilder("https://example.com", hooks)

        assert urls.login_url() == "https://sso.example.com/login"
        assert urls.registration_url() == "https://example.com/register"

    def test_reset_password_url(self) -> None:
        urls = UrlBuilder("https://example.com")
        assert urls.reset_password_url(7, "c0de") == "https://example.com/changepassword?u=7&c=c0de"

    def test_profile_url(self) -> None:
        assert UrlBuilder("https://example.com").profile_url("alice") == (
            "https://example.com/profile/alice"
        )


class TestAddQueryElements:
    """Tests for query string helper."""

    def test_skips_none(self) -> None:
        assert add_query_elements("https://x.org/a", {"a": 1, "b": None}) == "https://x.org/a?a=1"

    def test_appends_to_existing_query(self) -> None:
        assert add_query_elements("https://x.org/a?a=1", {"b": 2}) == "https://x.org/a?a=1&b=2"

    def test_empty_query(self) -> None:
        assert add_query_elements("https://x.org/a", {}) == "https://x.org/a"
