from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from ..schemas import RegisteredUser
from ..tracker import ProgressTracker
from .progress import get_tracker

router = APIRouter(prefix="/users", tags=["users"])


class LoginIn(BaseModel):
    name: str
    email: EmailStr


@router.post("/login", response_model=RegisteredUser)
def login(payload: LoginIn, tracker: ProgressTracker = Depends(get_tracker)) -> RegisteredUser:
    """Find the user by email, or create one with a fresh progress record."""
    return tracker.register_user(payload.name, payload.email)
