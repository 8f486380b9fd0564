"""User directory: lookup, profile updates, deletion, listing and the follow graph."""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..logging_config import timed, users_logger
from ..models.user import Follow, RelationshipStatus, User
from ..passwords import PasswordHashError, PasswordHasher, get_password_hasher
from ..responses import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    parse_id,
)
from ..schemas.users import UserUpdate

SORT_FIELDS = {
    "createdAt": User.created_at,
    "updatedAt": User.updated_at,
    "username": User.username,
    "email": User.email,
}

FILTER_FIELDS = {
    "username": User.username,
    "email": User.email,
    "city": User.city,
    "hometown": User.hometown,
    "from": User.hometown,
    "relationship": User.relationship_status,
    "isAdmin": User.is_admin,
}


def _coerce_filter_value(field: str, value: str):
    if field == "isAdmin":
        lowered = value.lower()
        if lowered not in ("true", "false"):
            raise ValidationError("filterValue for isAdmin must be true or false")
        return lowered == "true"
    if field == "relationship":
        try:
            return RelationshipStatus(value)
        except ValueError:
            raise ValidationError(
                "Invalid relationship value",
                {"allowed": [r.value for r in RelationshipStatus]},
            )
    return value


class UserService:
    """Service for user CRUD operations and follow/unfollow."""

    def __init__(self, db: Session, hasher: Optional[PasswordHasher] = None):
        self.db = db
        self.hasher = hasher or get_password_hasher()

    def get(self, user_id: str) -> User:
        user_id = parse_id(user_id, "user")
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _check_self_or_admin(self, actor: User, target_id: str, action: str) -> None:
        if actor.id != target_id and not actor.is_admin:
            users_logger.warning(
                f"Denied {action}",
                actor_id=actor.id,
                target_id=target_id,
            )
            raise AuthorizationError(f"Not authorized to {action} this user")

    @timed(users_logger)
    def update(self, actor: User, target_id: str, data: UserUpdate) -> User:
        target_id = parse_id(target_id, "user")
        self._check_self_or_admin(actor, target_id, "update")
        user = self.get(target_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "is_admin" in changes and not actor.is_admin:
            raise AuthorizationError("Only an admin can change admin status")

        if "email" in changes and changes["email"] != user.email:
            if self.db.query(User.id).filter(User.email == changes["email"]).first():
                raise ConflictError("Email already exists")
        if "username" in changes and changes["username"] != user.username:
            if self.db.query(User.id).filter(User.username == changes["username"]).first():
                raise ConflictError("Username already exists")

        password = changes.pop("password", None)
        if password:
            try:
                user.hashed_password = self.hasher.hash(password)
            except PasswordHashError as e:
                users_logger.error("Password hashing failed during update", error=e, user_id=user.id)
                raise InternalError("Error updating user")

        for field, value in changes.items():
            setattr(user, field, value)

        self._commit("update user")
        users_logger.info("User updated", user_id=user.id, fields=sorted(changes) + (["password"] if password else []))
        return user

    @timed(users_logger)
    def delete(self, actor: User, target_id: str) -> None:
        target_id = parse_id(target_id, "user")
        self._check_self_or_admin(actor, target_id, "delete")
        user = self.get(target_id)
        self.db.delete(user)
        self._commit("delete user")
        users_logger.info("User deleted", user_id=target_id, actor_id=actor.id)

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        order: str = "desc",
        filter_field: Optional[str] = None,
        filter_value: Optional[str] = None,
    ) -> List[User]:
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_by}'", {"allowed": list(SORT_FIELDS)})

        if filter_field is not None:
            if filter_field not in FILTER_FIELDS:
                raise ValidationError(
                    f"Cannot filter by '{filter_field}'",
                    {"allowed": list(FILTER_FIELDS)},
                )
            if filter_value is None:
                raise ValidationError("filterValue is required with filterField")

        query = self.db.query(User)
        if filter_field is not None:
            query = query.filter(FILTER_FIELDS[filter_field] == _coerce_filter_value(filter_field, filter_value))

        column = SORT_FIELDS[sort_by]
        query = query.order_by(column.desc() if order == "desc" else column.asc(), User.id)
        users = query.offset((page - 1) * limit).limit(limit).all()
        if not users:
            raise NotFoundError("No users found")
        return users

    @timed(users_logger)
    def follow(self, actor: User, target_id: str) -> None:
        """Add actor -> target. One edge row updates both users' sets."""
        target_id = parse_id(target_id, "user")
        if actor.id == target_id:
            raise ValidationError("You can't follow yourself")
        target = self.get(target_id)
        if self.db.get(Follow, (actor.id, target.id)) is not None:
            raise ConflictError("You already follow this user")

        self.db.add(Follow(follower_id=actor.id, followed_id=target.id))
        self._commit("follow user")
        self._expire_graph(actor, target)
        users_logger.info("User followed", actor_id=actor.id, target_id=target.id)

    @timed(users_logger)
    def unfollow(self, actor: User, target_id: str) -> None:
        target_id = parse_id(target_id, "user")
        if actor.id == target_id:
            raise ValidationError("You can't unfollow yourself")
        target = self.get(target_id)

        edge = self.db.get(Follow, (actor.id, target.id))
        if edge is None:
            raise ConflictError("You are not following this user")

        self.db.delete(edge)
        self._commit("unfollow user")
        self._expire_graph(actor, target)
        users_logger.info("User unfollowed", actor_id=actor.id, target_id=target.id)

    def _expire_graph(self, actor: User, target: User) -> None:
        # Collections are reloaded from the edge table on next access
        self.db.expire(actor, ["following_links", "follower_links"])
        self.db.expire(target, ["following_links", "follower_links"])

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Could not {action}: conflicting change")
        except SQLAlchemyError as e:
            self.db.rollback()
            users_logger.error(f"Failed to {action}", error=e)
            raise InternalError(f"Could not {action}")
