"""
Emit-hook registration for host build tools.

Hosts come in two shapes:

- async hook style: ``host.hooks.emit.tap_async(name, fn)``
- legacy callback style: ``host.plugin("emit", fn)``

Both are reduced to one operation, ``register(name, callback)``, where the
callback is called as ``callback(compilation, done)``.
"""

from typing import Any, Callable, Protocol

EmitCallback = Callable[[Any, Callable[[], None]], Any]

EMIT_EVENT = "emit"


class EmitHookRegistrar(Protocol):
    def register(self, name: str, callback: EmitCallback) -> None:
        ...


class AsyncHookRegistrar:
    """Registers through ``host.hooks.emit.tap_async``."""

    def __init__(self, host: Any) -> None:
        self.host = host

    @staticmethod
    def supports(host: Any) -> bool:
        hooks = getattr(host, "hooks", None)
        emit = getattr(hooks, EMIT_EVENT, None)
        return callable(getattr(emit, "tap_async", None))

    def register(self, name: str, callback: EmitCallback) -> None:
        self.host.hooks.emit.tap_async(name, callback)


class LegacyCallbackRegistrar:
    """Registers through ``host.plugin("emit", fn)``."""

    def __init__(self, host: Any) -> None:
        self.host = host

    @staticmethod
    def supports(host: Any) -> bool:
        return callable(getattr(host, "plugin", None))

    def register(self, name: str, callback: EmitCallback) -> None:
        self.host.plugin(EMIT_EVENT, callback)


def registrar_for(host: Any) -> EmitHookRegistrar:
    """
    Pick the registrar matching the host's capabilities.

    Raises:
        TypeError: If the host exposes neither hook style
    """
    if AsyncHookRegistrar.supports(host):
        return AsyncHookRegistrar(host)
    if LegacyCallbackRegistrar.supports(host):
        return LegacyCallbackRegistrar(host)
    raise TypeError(
        f"{type(host).__name__} exposes neither hooks.emit.tap_async nor plugin()"
    )
