# recipehub/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Authentication and message error types
- redis_client: Redis client factory
- revocation: Token blacklist stored in Redis
- security: Password hashing and JWT creation/decoding
- tokens: Access-token validation shared by HTTP and WebSocket
"""
