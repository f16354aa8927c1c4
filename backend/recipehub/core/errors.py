# recipehub/core/errors.py
"""
Error types raised by the authentication and realtime layers.

- AuthenticationFailure: token missing, invalid, expired, revoked or without a user
  identity. The HTTP layer turns it into a 401; the gateway sends an error frame and closes.
- MalformedMessage: an inbound WebSocket frame that cannot be parsed or lacks a
  required field. The sender gets an error frame and the connection stays open.
"""


class AuthenticationFailure(Exception):
    def __init__(self, message: str, code: str = "AUTH_INVALID_TOKEN"):
        super().__init__(message)
        self.message = message  # Client-facing text (WebSocket error frame)
        self.code = code        # HTTP detail code


class MalformedMessage(Exception):
    def __init__(self, message: str = "Invalid message format"):
        super().__init__(message)
        self.message = message
