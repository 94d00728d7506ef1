"""
User provisioning and profile management.
"""

import logging
import math
from dataclasses import dataclass

import config
from domain import error_codes
from domain.errors import BettingError
from domain.models.user import User
from repositories.interfaces import IUserRepository
from services.interfaces import IUserService
from services.permissions import AuthContext, require_admin, require_authenticated
from services.result import Result

logger = logging.getLogger("friendly_bets.user_service")

DEFAULT_DISPLAY_NAME = "User"


@dataclass(frozen=True)
class UserPage:
    users: list[User]
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class UserService(IUserService):
    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    def get_or_create_user(self, auth: AuthContext, email: str = "", name: str | None = None) -> Result[User]:
        """
        Return the caller's user row, creating it on first authentication.

        New users start with a zero balance. The stored admin flag follows
        the auth fact.
        """
        try:
            require_authenticated(auth)
        except BettingError as exc:
            return Result.from_error(exc)

        user = self.user_repo.get_by_id(auth.user_id)
        if user is None:
            display_name = (name or "").strip() or DEFAULT_DISPLAY_NAME
            try:
                user = self.user_repo.add(auth.user_id, display_name, email or "", is_admin=auth.is_admin)
                logger.info(f"User provisioned: {auth.user_id}")
            except ValueError:
                # Created concurrently by another request
                user = self.user_repo.get_by_id(auth.user_id)
        elif user.is_admin != auth.is_admin:
            self.user_repo.set_admin(auth.user_id, auth.is_admin)
            user = self.user_repo.get_by_id(auth.user_id)
        return Result.ok(user)

    def get_user(self, user_id: str) -> Result[User]:
        user = self.user_repo.get_by_id(user_id)
        if user is None:
            return Result.fail(f"User {user_id} not found.", code=error_codes.USER_NOT_FOUND)
        return Result.ok(user)

    def update_profile(self, user_id: str, name: str) -> Result[User]:
        if not name or not name.strip():
            return Result.fail("Name is required.", code=error_codes.VALIDATION_ERROR)
        if not self.user_repo.update_profile(user_id, name=name.strip()):
            return Result.fail(f"User {user_id} not found.", code=error_codes.USER_NOT_FOUND)
        return Result.ok(self.user_repo.get_by_id(user_id))

    def list_users(
        self,
        actor: AuthContext,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Result[UserPage]:
        """Admin listing of users, searchable by name or email."""
        try:
            require_admin(actor)
        except BettingError as exc:
            return Result.from_error(exc)
        if limit is None:
            limit = config.USER_PAGE_SIZE
        page = max(1, int(page))
        limit = max(1, int(limit))
        search = search.strip() if search and search.strip() else None

        total_count = self.user_repo.count(search)
        total_pages = math.ceil(total_count / limit) if total_count else 0
        users = self.user_repo.search(search, limit=limit, offset=(page - 1) * limit)
        return Result.ok(
            UserPage(
                users=users,
                current_page=page,
                total_pages=total_pages,
                total_count=total_count,
                has_next=page < total_pages,
                has_prev=page > 1,
            )
        )
