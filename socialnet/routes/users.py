"""
User directory routes: profiles, listing, follow/unfollow.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_access_token
from ..database import get_db
from ..models.user import User
from ..schemas.auth import MessageResponse
from ..schemas.users import UserEnvelope, UserResponse, UserUpdate
from ..services.users import UserService

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(require_access_token)],
)


@router.get("", response_model=List[UserResponse])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    filter_field: Optional[str] = Query(None, alias="filterField"),
    filter_value: Optional[str] = Query(None, alias="filterValue"),
    db: Session = Depends(get_db),
):
    """Paginated, sortable, filterable user listing."""
    return UserService(db).list(page, limit, sort_by, order, filter_field, filter_value)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return {"user": UserService(db).get(user_id)}


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a user (self or admin). A new password is hashed before storing."""
    return UserService(db).update(current_user, user_id, user_update)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    UserService(db).delete(current_user, user_id)
    return {"message": "User deleted successfully"}


@router.put("/{user_id}/follow", response_model=MessageResponse)
def follow_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    UserService(db).follow(current_user, user_id)
    return {"message": "User followed successfully"}


@router.put("/{user_id}/unfollow", response_model=MessageResponse)
def unfollow_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    UserService(db).unfollow(current_user, user_id)
    return {"message": "User unfollowed successfully"}
