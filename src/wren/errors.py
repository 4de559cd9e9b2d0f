"""Wren exception hierarchy.

Shared across the route tree, the router, and the CLI so every module
raises and catches the same types.

Soft navigation failures (no matching route, missing component, too many
redirects) are never raised. They are logged and dispatched as
``routeerror`` events instead. Only configuration mistakes and misuse of
the router surface become exceptions.
"""


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when route records or router options are invalid.

    Always raised while compiling the route tree or constructing the
    router, never in the middle of a navigation.
    """


class RouterError(WrenError):
    """Raised when the router surface is used without a window attached."""


class LazyLoadError(WrenError):
    """A lazy import string could not be resolved.

    Chains the underlying ``ImportError`` / ``AttributeError``. The
    navigation engine does not catch it: it propagates out of
    ``Router.navigate()``.
    """

    def __init__(self, target: str, detail: str = "") -> None:
        self.target = target
        message = f"Could not load {target!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
