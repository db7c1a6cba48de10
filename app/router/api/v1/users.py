"""
User router - profile endpoint (protected).
"""
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.dependencies import current_user_id
from app.core.exceptions import NotFound
from app.crud import user_crud
from app.schema.auth import UserProfile

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_me(
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db)
):
    """Current user's profile."""
    user = user_crud.get(db, user_id)
    if not user:
        raise NotFound("User")
    return UserProfile.model_validate(user)
