"""Event dispatch: context, built-ins and the dispatcher."""

from relaybot.dispatch.context import BotClock, DispatchContext
from relaybot.dispatch.dispatcher import DispatchOutcome, Dispatcher

__all__ = ["BotClock", "DispatchContext", "DispatchOutcome", "Dispatcher"]
