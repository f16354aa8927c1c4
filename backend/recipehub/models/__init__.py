# recipehub/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Session: Refresh-token session, one per signed-in device
- Device: Push-notification token registration
- Recipe: Recipe authored by a user
- Review: Rating left on a recipe
"""
from .user import User, Session, Device
from .recipe import Recipe, Review
