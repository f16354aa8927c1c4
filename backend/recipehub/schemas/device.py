# recipehub/schemas/device.py
"""Push-notification token registration payload."""
from pydantic import BaseModel, Field


class FirebaseTokenIn(BaseModel):
    deviceId: str = Field(min_length=1, max_length=128)
    firebaseToken: str = Field(min_length=1, max_length=512)
