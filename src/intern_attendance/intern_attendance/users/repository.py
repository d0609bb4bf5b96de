from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuthAccount, User


class UserRepository(Protocol):
    """Profile storage.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> None:
        raise NotImplementedError

    def update(self, user: User) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError

    def set_profile_photo(self, user_id: str, photo_url: str) -> bool:
        raise NotImplementedError


class AuthAccountRepository(Protocol):
    def get_by_id(self, account_id: str) -> Optional[AuthAccount]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[AuthAccount]:
        raise NotImplementedError

    def create(self, account: AuthAccount) -> None:
        raise NotImplementedError

    def update(self, account_id: str, *, email: Optional[str] = None, password_hash: Optional[str] = None) -> bool:
        raise NotImplementedError

    def delete(self, account_id: str) -> bool:
        raise NotImplementedError
