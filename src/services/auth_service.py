"""Local user accounts.

Users live under the ``users`` key and the signed-in user under
``currentUser``. Passwords are stored as bcrypt hashes.
"""

import time
from dataclasses import asdict, dataclass
from typing import Optional

import bcrypt
from loguru import logger

from calc.errors import ValidationError
from services.storage import KeyValueStore, load_json, load_json_list, save_json


USERS_KEY = 'users'
CURRENT_USER_KEY = 'currentUser'


@dataclass
class User:
    id: str
    username: str
    password_hash: str

    @classmethod
    def from_dict(cls, data: dict) -> 'User':
        return cls(
            id=str(data['id']),
            username=data['username'],
            password_hash=data.get('password_hash', ''),
        )


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # malformed hash
        return False


class AuthService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def _users(self):
        users = []
        for raw in load_json_list(self.store, USERS_KEY):
            try:
                users.append(User.from_dict(raw))
            except (KeyError, TypeError):
                logger.warning("Skipping malformed user record: {}", raw)
        return users

    def register(self, username: str, password: str) -> bool:
        """Create an account.

        Returns:
            False when the username is already taken

        Raises:
            ValidationError: Empty username or password
        """
        username = (username or '').strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        users = self._users()
        if any(u.username == username for u in users):
            return False

        users.append(User(
            id=str(int(time.time() * 1000)),
            username=username,
            password_hash=hash_password(password),
        ))
        save_json(self.store, USERS_KEY, [asdict(u) for u in users])
        logger.info("Registered user {}", username)
        return True

    def login(self, username: str, password: str) -> bool:
        for user in self._users():
            if user.username == username and verify_password(password, user.password_hash):
                save_json(self.store, CURRENT_USER_KEY, asdict(user))
                return True
        return False

    def logout(self) -> None:
        self.store.remove(CURRENT_USER_KEY)

    def current_user(self) -> Optional[User]:
        data = load_json(self.store, CURRENT_USER_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return User.from_dict(data)
        except KeyError:
            return None
