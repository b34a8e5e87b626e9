"""
Permission engine.

Users are configured once at start-up. Each user has a credential (a
plain key, or an Unsafe sentinel that bypasses the strength policy) and
a grant:

- AllGrant: every method on every sheet
- MethodsGrant: the listed methods on every sheet
- BySheetGrant: sheet name (case-insensitive) -> AllGrant | MethodsGrant,
  with an optional fallback for sheets not listed (the "ALL" key)

Example configuration:
    [
        {"name": "admin", "key": "myStr0ng!Pass", "permissions": "*"},
        {"name": "poweruser", "key": "P0wer!User",
         "permissions": {"logs": ["GET", "POST"], "analytics": "GET"}},
        {"name": "anonymous", "key": {"__unsafe": ""},
         "permissions": {"submissions": "POST"}},
    ]
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from config import ALL, ALL_SHEETS_KEY, MIN_KEY_LENGTH

STRONG_KEY_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[\x20-\x2F\x3A-\x40\x5B-\x60\x7B-\x7E])"
    rf"(?=.{{{MIN_KEY_LENGTH},}})"
)


class ConfigError(ValueError):
    """Raised for an invalid user table."""


@dataclass(frozen=True)
class Unsafe:
    """A credential exempt from the strength policy. For prototyping only."""
    key: str


@dataclass(frozen=True)
class AllGrant:
    def allows(self, method: str) -> bool:
        return True


@dataclass(frozen=True)
class MethodsGrant:
    methods: frozenset[str]

    def allows(self, method: str) -> bool:
        return ALL in self.methods or method in self.methods


MethodGrant = AllGrant | MethodsGrant


@dataclass(frozen=True)
class BySheetGrant:
    sheets: Mapping[str, MethodGrant]  # keys lowercased
    fallback: MethodGrant | None = None

    def for_sheet(self, sheet: str) -> MethodGrant | None:
        return self.sheets.get((sheet or "").lower(), self.fallback)


Grant = AllGrant | MethodsGrant | BySheetGrant


@dataclass(frozen=True)
class User:
    name: str
    credential: str | Unsafe
    grant: Grant = field(default_factory=AllGrant)

    @property
    def is_unsafe(self) -> bool:
        return isinstance(self.credential, Unsafe)


def _method_grant(value: Any, where: str) -> MethodGrant:
    """Parse "*", "GET" or ["GET", "POST"] into a method grant."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(m, str) for m in value):
        raise ConfigError(f"{where}: permissions must be a method name or a list of method names")
    methods = frozenset(m.upper() if m != ALL else m for m in value)
    if ALL in methods:
        return AllGrant()
    return MethodsGrant(methods)


def parse_grant(value: Any, where: str = "permissions") -> Grant:
    """
    Parse a permissions value from configuration.

    Args:
        value: "*", a method name, a list of method names, or a mapping of
               sheet name -> method name / list (optional "ALL" fallback key)
        where: Context for error messages

    Raises:
        ConfigError: For any other shape
    """
    if isinstance(value, Mapping):
        sheets: dict[str, MethodGrant] = {}
        fallback: MethodGrant | None = None
        for sheet, methods in value.items():
            grant = _method_grant(methods, f"{where}.{sheet}")
            if sheet == ALL_SHEETS_KEY:
                fallback = grant
            else:
                sheets.setdefault(str(sheet).lower(), grant)
        return BySheetGrant(sheets, fallback)
    return _method_grant(value, where)


def parse_credential(value: Any, where: str = "key") -> str | Unsafe:
    """Parse "secret" or {"__unsafe": "secret"}."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("__unsafe"), str):
        return Unsafe(value["__unsafe"])
    raise ConfigError(f"{where}: key must be a string or {{\"__unsafe\": \"...\"}}")


def load_users(config: Iterable[Mapping[str, Any]]) -> list[User]:
    """Build users from a JSON-like user table."""
    users = []
    for i, entry in enumerate(config):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"users[{i}]: must be an object")
        name = str(entry.get("name") or f"user{i}")
        if "key" not in entry:
            raise ConfigError(f"users[{i}] ({name}): key is required")
        users.append(User(
            name=name,
            credential=parse_credential(entry["key"], f"users[{i}].key"),
            grant=parse_grant(entry.get("permissions"), f"users[{i}].permissions"),
        ))
    return users


class PermissionEngine:
    """
    Resolves callers and authorizes (sheet, method) pairs.
    Immutable once built.
    """

    def __init__(self, users: Iterable[User]) -> None:
        self._users: tuple[User, ...] = tuple(users)

    @classmethod
    def from_config(cls, config: Iterable[Mapping[str, Any]]) -> PermissionEngine:
        return cls(load_users(config))

    @property
    def users(self) -> tuple[User, ...]:
        return self._users

    def resolve_user(self, credential: str) -> User | None:
        """First user whose key, or unsafe key, equals credential."""
        for user in self._users:
            if user.credential == credential:
                return user
            if isinstance(user.credential, Unsafe) and user.credential.key == credential:
                return user
        return None

    def is_strong_credential(self, credential: str) -> bool:
        """True for unsafe users and for keys that satisfy the strength policy."""
        user = self.resolve_user(credential)
        if user is None:
            return False
        if isinstance(user.credential, Unsafe):
            return True
        return STRONG_KEY_PATTERN.match(user.credential) is not None

    def grant_for(self, user: User, sheet: str) -> MethodGrant | None:
        if isinstance(user.grant, BySheetGrant):
            return user.grant.for_sheet(sheet)
        return user.grant

    def authorize(self, credential: str, sheet: str, method: str) -> bool:
        user = self.resolve_user(credential)
        if user is None:
            return False
        grant = self.grant_for(user, sheet)
        if grant is None:
            return False
        return grant.allows(method)
