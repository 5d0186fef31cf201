"""
Extension points - hook chains, the event bus and URL generation.

A HookChain is an ordered pipeline of handlers sharing a mutable
result value: each handler receives the trigger parameters and the
current value, and a non-None return replaces the value for the
handlers that follow. Handlers run by ascending priority, then in
registration order.

The EventBus delivers fire-and-forget events (ban, unban) and owns the
HookChain used to filter values such as generated URLs or notification
subscriber lists.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 500

HookHandler = Callable[[dict[str, Any], Any], Any]
EventHandler = Callable[[Any], None]


class HookChain:
    """Named pipelines of value-filtering handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[tuple[int, int, HookHandler]]] = defaultdict(list)
        self._sequence = 0

    def register(self, name: str, handler: HookHandler, priority: int = DEFAULT_PRIORITY) -> None:
        self._sequence += 1
        self._handlers[name].append((priority, self._sequence, handler))
        self._handlers[name].sort(key=lambda entry: (entry[0], entry[1]))

    def unregister(self, name: str, handler: HookHandler) -> bool:
        entries = self._handlers.get(name, [])
        for entry in entries:
            if entry[2] is handler:
                entries.remove(entry)
                return True
        return False

    def has_handlers(self, name: str) -> bool:
        return bool(self._handlers.get(name))

    def trigger(self, name: str, params: dict[str, Any] | None = None, value: Any = None) -> Any:
        params = params or {}
        for _, _, handler in list(self._handlers.get(name, [])):
            result = handler(params, value)
            if result is not None:
                value = result
        return value


class EventBus:
    """Event subscription and dispatch, plus the shared HookChain."""

    def __init__(self, hooks: HookChain | None = None) -> None:
        self.hooks = hooks if hooks is not None else HookChain()
        self._listeners: dict[str, list[tuple[int, int, EventHandler]]] = defaultdict(list)
        self._sequence = 0

    def on(self, event: str, handler: EventHandler, priority: int = DEFAULT_PRIORITY) -> None:
        self._sequence += 1
        self._listeners[event].append((priority, self._sequence, handler))
        self._listeners[event].sort(key=lambda entry: (entry[0], entry[1]))

    def emit(self, event: str, obj: Any) -> None:
        logger.debug("Emitting event %s", event)
        for _, _, handler in list(self._listeners.get(event, [])):
            handler(obj)


class UrlBuilder:
    """
    Generates site URLs.

    Registration and login URLs pass through the "registration_url" and
    "login_url" hooks, whose handlers receive {"query": ..., "fragment": ...}
    and may return a replacement URL.
    """

    def __init__(self, site_url: str, hooks: HookChain | None = None) -> None:
        self.site_url = site_url.rstrip("/")
        self.hooks = hooks if hooks is not None else HookChain()

    def normalize(self, path: str) -> str:
        return f"{self.site_url}/{path.lstrip('/')}"

    def registration_url(self, query: dict[str, Any] | None = None, fragment: str = "") -> str:
        return self._hooked_url("registration_url", "register", query, fragment)

    def login_url(self, query: dict[str, Any] | None = None, fragment: str = "") -> str:
        return self._hooked_url("login_url", "login", query, fragment)

    def reset_password_url(self, guid: int, code: str) -> str:
        return add_query_elements(self.normalize("changepassword"), {"u": guid, "c": code})

    def profile_url(self, username: str) -> str:
        return self.normalize(f"profile/{username}")

    def _hooked_url(
        self, hook: str, path: str, query: dict[str, Any] | None, fragment: str
    ) -> str:
        query = dict(query or {})
        url = add_query_elements(self.normalize(path), query) + fragment
        return self.hooks.trigger(hook, {"query": query, "fragment": fragment}, url)


def add_query_elements(url: str, query: dict[str, Any]) -> str:
    """Append query elements to url, skipping None values."""
    elements = {key: value for key, value in query.items() if value is not None}
    if not elements:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(elements)}"
