from __future__ import annotations

from typing import Optional, Protocol

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        raise NotImplementedError

    def add(self, user: User) -> int:
        """Insert ``user`` (its ``user_id`` is ignored) and return the new id."""

        raise NotImplementedError

    def update(self, user: User) -> None:
        raise NotImplementedError

    def delete(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_page(self, *, role: Optional[Role], page: PageRequest) -> Page[User]:
        raise NotImplementedError
