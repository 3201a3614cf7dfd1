# network/dispatcher.py
from __future__ import annotations
from typing import Any, Callable

from tronserver.network.transport.envelope import LegacyEnvelope

Handler = Callable[[Any, LegacyEnvelope, tuple[str, int]], None]  # (ctx, envelope, addr)


class PacketDispatcher:
    def __init__(self, on_unknown: Handler | None = None):
        # Maps Descriptor (int) -> Handler Function
        self._handlers: dict[int, Handler] = {}
        self.on_unknown = on_unknown

    def route(self, descriptor: int):
        """
        Decorator to register a handler for a specific descriptor.
        Usage: @dispatcher.route(Descriptor.GET_SMALL_SERVER_INFO)
        """
        def decorator(func):
            if descriptor in self._handlers:
                print(f"[WARN] Overwriting handler for descriptor {int(descriptor)}")
            self._handlers[int(descriptor)] = func
            return func
        return decorator

    def handler_for(self, descriptor: int) -> Handler | None:
        return self._handlers.get(int(descriptor))

    def dispatch(self, ctx: Any, envelope: LegacyEnvelope, addr: tuple[str, int]) -> bool:
        """Runs the handler for the envelope's descriptor. Returns False if none was found."""
        handler = self.handler_for(envelope.descriptor_id)

        if handler:
            handler(ctx, envelope, addr)
            return True

        if self.on_unknown:
            self.on_unknown(ctx, envelope, addr)
        else:
            print(f"[UDP] Unhandled descriptor {envelope.descriptor_id}")
        return False
