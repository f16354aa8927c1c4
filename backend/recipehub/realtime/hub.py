# recipehub/realtime/hub.py
"""
One realtime hub per application instance.
Holds the registry and topic table and hands them to the router, notifier and
gateway, so nothing reaches back into a module-level singleton.
"""
from recipehub.core.tokens import TokenValidator

from .gateway import Gateway
from .notifier import Notifier
from .registry import ConnectionRegistry
from .router import MessageRouter
from .subscriptions import SubscriptionTable


class RealtimeHub:
    def __init__(self, validator: TokenValidator, auth_timeout: float = 10.0):
        self.registry = ConnectionRegistry()
        self.subscriptions = SubscriptionTable()
        self.router = MessageRouter(self.subscriptions)
        self.notifier = Notifier(self.registry, self.subscriptions)
        self.gateway = Gateway(
            validator,
            self.registry,
            self.subscriptions,
            self.router,
            auth_timeout=auth_timeout,
        )
