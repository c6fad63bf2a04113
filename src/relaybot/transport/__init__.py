"""Messaging transports."""

from relaybot.transport.base import Transport
from relaybot.transport.bridge import BridgeTransport
from relaybot.transport.console import ConsoleTransport

__all__ = ["BridgeTransport", "ConsoleTransport", "Transport"]
