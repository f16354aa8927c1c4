# recipehub/models/user.py
"""
Database models for user accounts.
Holds the account itself, its refresh-token sessions (one per signed-in
device) and the push-notification tokens registered by its devices.
"""
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Sessions (one per signed-in device, via related_name="sessions")
    - Has many Devices (push-notification registrations)
    - Has many Recipes and Reviews

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users
    """
    id = fields.IntField(pk=True)  # Primary key; becomes the "sub" claim of issued tokens
    name = fields.CharField(max_length=128)
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login identifier
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    preferences = fields.JSONField(default=list)  # Free-form dietary preferences
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"


class Session(models.Model):
    """
    Refresh-token session.

    A row exists for every device that is currently signed in. Logging out
    deletes the row for that refresh token; logging out everywhere deletes
    all rows of the user.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="sessions", on_delete=fields.CASCADE)
    refresh_token = fields.CharField(max_length=512, unique=True, index=True)
    expires_at = fields.DatetimeField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "sessions"


class Device(models.Model):
    """Push-notification registration of one client device."""
    id = fields.IntField(pk=True)
    device_id = fields.CharField(max_length=128, unique=True, index=True)
    firebase_token = fields.CharField(max_length=512)
    user = fields.ForeignKeyField("models.User", related_name="devices", null=True, on_delete=fields.SET_NULL)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "devices"
