from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.database import SessionLocal
from backend.scheduling.lifecycle import AppointmentLifecycleManager
from backend.scheduling.records import UserRecord
from backend.scheduling.sql_store import SqlSchedulingStore
from backend.scheduling.store import SchedulingStore

security = HTTPBearer()


def get_store() -> SchedulingStore:
    return SqlSchedulingStore(SessionLocal)


def get_lifecycle_manager(store: SchedulingStore = Depends(get_store)) -> AppointmentLifecycleManager:
    return AppointmentLifecycleManager(store)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: SchedulingStore = Depends(get_store),
) -> UserRecord:
    try:
        user_id = jwt_handler.user_id_from_token(credentials.credentials)
    except jwt_handler.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    user = store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user
