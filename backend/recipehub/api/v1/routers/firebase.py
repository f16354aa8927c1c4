# recipehub/api/v1/routers/firebase.py
from fastapi import APIRouter, Depends

from recipehub.api.v1.deps import get_current_user
from recipehub.models.user import Device, User
from recipehub.schemas.device import FirebaseTokenIn

router = APIRouter(prefix="/firebase", tags=["firebase"])


@router.post("/token")
async def update_firebase_token(body: FirebaseTokenIn, user: User = Depends(get_current_user)):
    """
    Register or refresh the push-notification token of a device.

    The device row is keyed by deviceId; re-registering moves it to the
    current user and replaces the token.
    """
    device, created = await Device.update_or_create(
        defaults={"firebase_token": body.firebaseToken, "user": user},
        device_id=body.deviceId,
    )
    return {"success": True, "data": {"deviceId": device.device_id, "created": created}}
