"""relaybot: inbound message dispatch core for chat bots."""

__version__ = "1.0.0"
