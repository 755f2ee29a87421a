"""
File-backed application state for the course-builder client.

Holds the local user list, the signed-in user, each user's saved courses and
the UI theme. State is loaded once when the store is created and written back
after every action that changes it. Passwords are stored and compared in
plaintext; this is a local convenience list, not an account system.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from syllabuild.core.config import get_settings
from syllabuild.core.errors import ValidationError
from syllabuild.schemas.base import CamelSchema
from syllabuild.schemas.course import Course

logger = logging.getLogger(__name__)

Theme = Literal["dark", "light"]

_SPECIAL_CHARS = re.compile(r"""[!@#$%^&*()_\-+=\[\]{};:'",.<>/?\\|`~]""")


class UserAccount(CamelSchema):
    name: str
    email: str
    password: str


class AppState(CamelSchema):
    users: List[UserAccount] = Field(default_factory=list)
    current_user_email: Optional[str] = None
    courses: Dict[str, List[Course]] = Field(default_factory=dict)
    theme: Theme = "dark"


# ---------- Actions ----------

@dataclass
class SignUp:
    name: str
    email: str
    password: str
    confirm_password: str


@dataclass
class SignIn:
    email: str
    password: str


@dataclass
class SignOut:
    pass


@dataclass
class AddCourse:
    course: Course


@dataclass
class SetTheme:
    theme: Theme


Action = Union[SignUp, SignIn, SignOut, AddCourse, SetTheme]


def validate_password(password: str) -> Optional[str]:
    """Return the user-facing complaint for a weak password, or None."""
    missing = []
    if len(password) < 8:
        missing.append("at least 8 characters")
    if not re.search(r"[A-Z]", password):
        missing.append("1 uppercase letter")
    if not re.search(r"[a-z]", password):
        missing.append("1 lowercase letter")
    if not re.search(r"\d", password):
        missing.append("1 number")
    if not _SPECIAL_CHARS.search(password):
        missing.append("1 special character")
    if missing:
        return f"Password must include {', '.join(missing)}."
    return None


class StateStore:
    """Explicit replacement for the browser's ambient globals."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or get_settings().state_file
        self.state = self._load()

    def _load(self) -> AppState:
        if not os.path.exists(self.path):
            return AppState()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return AppState.model_validate(json.load(f))
        except (OSError, ValueError, PydanticValidationError) as e:
            # A corrupt file starts a fresh state rather than blocking the client
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return AppState()

    def _save(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(self.state.model_dump_json(by_alias=True, exclude_none=True, indent=2))

    # ---------- Queries ----------

    @property
    def current_user(self) -> Optional[UserAccount]:
        return self._find_user(self.state.current_user_email)

    def my_courses(self) -> List[Course]:
        if not self.state.current_user_email:
            return []
        return list(self.state.courses.get(self.state.current_user_email, []))

    def _find_user(self, email: Optional[str]) -> Optional[UserAccount]:
        return next((u for u in self.state.users if u.email == email), None)

    # ---------- Dispatch ----------

    def dispatch(self, action: Action) -> AppState:
        """Apply one action, persist, and return the new state."""
        if isinstance(action, SignUp):
            self._sign_up(action)
        elif isinstance(action, SignIn):
            self._sign_in(action)
        elif isinstance(action, SignOut):
            self.state.current_user_email = None
        elif isinstance(action, AddCourse):
            self._add_course(action.course)
        elif isinstance(action, SetTheme):
            self.state.theme = action.theme
        else:
            raise TypeError(f"Unknown action: {action!r}")

        self._save()
        return self.state

    def _sign_up(self, action: SignUp):
        name = action.name.strip()
        email = action.email.strip().lower()
        if not name or not email or not action.password or not action.confirm_password:
            raise ValidationError("All fields are required.")
        if self._find_user(email):
            raise ValidationError("Email already registered.")
        if action.password != action.confirm_password:
            raise ValidationError("Passwords do not match.")
        complaint = validate_password(action.password)
        if complaint:
            raise ValidationError(complaint)

        self.state.users.append(UserAccount(name=name, email=email, password=action.password))
        self.state.current_user_email = email
        self.state.courses[email] = []
        logger.info(f"Registered local user {email}")

    def _sign_in(self, action: SignIn):
        email = action.email.strip().lower()
        user = self._find_user(email)
        if not user or user.password != action.password:
            raise ValidationError("Invalid credentials.")
        self.state.current_user_email = user.email

    def _add_course(self, course: Course):
        email = self.state.current_user_email
        # Courses only belong to a signed-in user
        if not email:
            return
        self.state.courses.setdefault(email, []).append(course)
