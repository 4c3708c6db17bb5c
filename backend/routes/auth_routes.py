"""
Authentication Routes - The signed-in user

Sessions are issued by the external identity provider; the first
authenticated request creates the internal user record.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth_schemas import UserResponse
from security import get_current_user
from services.access_service import get_or_create_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the internal user for the current session.

    Raises:
        HTTPException 401: Invalid or missing session
    """
    user = get_or_create_user(db, current_user)
    return UserResponse.model_validate(user)
