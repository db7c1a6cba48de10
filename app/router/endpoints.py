"""
API Router - all endpoints.
"""
from fastapi import APIRouter
from app.router.api.v1 import auth, users, rooms, messages, files, notifications, ws

api_router = APIRouter(prefix="/api")

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)

api_router.include_router(
    rooms.router,
    prefix="/rooms",
    tags=["Rooms"],
)

api_router.include_router(
    messages.router,
    prefix="/messages",
    tags=["Messages"],
)

api_router.include_router(
    files.router,
    prefix="/files",
    tags=["Files"],
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["Notifications"],
)

api_router.include_router(
    ws.router,
    tags=["Realtime"],
)
