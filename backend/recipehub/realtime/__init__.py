# recipehub/realtime/__init__.py
"""
Real-time subscription and session-invalidation subsystem.
- connection: Connection handle wrapping a WebSocket and its lifecycle state
- registry: user id -> live connections
- subscriptions: recipe id -> subscribed connections
- router: inbound control-message dispatch
- notifier: outbound fan-out API used by the HTTP layer
- gateway: handshake, authentication, receive loop and cleanup
- hub: wires the pieces together for one application instance
"""
from .connection import Connection, ConnectionState
from .registry import ConnectionRegistry
from .subscriptions import SubscriptionTable, canonical_id
from .router import MessageRouter
from .notifier import Notifier
from .gateway import Gateway
from .hub import RealtimeHub
