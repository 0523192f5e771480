from __future__ import annotations

from abc import abstractmethod
from typing import Annotated, Any, ClassVar, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from user_admin.errors import ValidationError

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _bool_or_false(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _whole_number(value: Any) -> int:
    # JSON booleans are ints in Python; they are not referral counts.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("referral count must be a number")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("referral count must be a whole number")
    n = int(value)
    if not _INT64_MIN <= n <= _INT64_MAX:
        raise ValueError("referral count is out of range")
    return n


# Missing or mistyped optional fields fall back to their zero value.
LenientStr = Annotated[str, BeforeValidator(_str_or_empty)]
LenientBool = Annotated[bool, BeforeValidator(_bool_or_false)]
WholeNumber = Annotated[int, BeforeValidator(_whole_number)]


def casefold_username(username: str) -> str:
    """Case-insensitive lookup key stored alongside the username as typed."""
    return username.casefold()


class UserAction(BaseModel):
    """One variant of the `/api/user-action` payload."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tag: ClassVar[str]
    legacy_tag: ClassVar[str]

    username: LenientStr = ""

    @property
    def username_key(self) -> str:
        return casefold_username(self.username)

    @abstractmethod
    def statement(self) -> tuple[str, tuple[Any, ...]]:
        """Single-row SQL statement and its parameters."""


class CreateUser(UserAction):
    tag = "create-user"
    legacy_tag = "inserirUsuario"

    password: LenientStr = ""
    renewal_date: LenientStr = Field(default="", validation_alias=AliasChoices("renewalDate", "renewal_date"))

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return (
            "INSERT INTO users (username, username_key, password, is_blocked, renewal_date, indicacao)"
            " VALUES (?, ?, ?, 0, ?, 0)",
            (self.username, self.username_key, self.password, self.renewal_date),
        )


class SetPassword(UserAction):
    tag = "set-password"
    legacy_tag = "atualizarSenha"

    new_password: LenientStr = Field(default="", validation_alias=AliasChoices("newPassword", "new_password"))

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return "UPDATE users SET password = ? WHERE username_key = ?", (self.new_password, self.username_key)


class SetBlocked(UserAction):
    tag = "set-blocked"
    legacy_tag = "bloquearUsuario"

    is_blocked: LenientBool = Field(default=False, validation_alias=AliasChoices("isBlocked", "is_blocked"))

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return "UPDATE users SET is_blocked = ? WHERE username_key = ?", (int(self.is_blocked), self.username_key)


class SetRenewal(UserAction):
    tag = "set-renewal"
    legacy_tag = "atualizarRenovacao"

    renewal_date: LenientStr = Field(default="", validation_alias=AliasChoices("renewalDate", "renewal_date"))

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return "UPDATE users SET renewal_date = ? WHERE username_key = ?", (self.renewal_date, self.username_key)


class SetReferral(UserAction):
    tag = "set-referral"
    legacy_tag = "atualizarIndicacao"

    # The only strictly validated field.
    indicacao: WholeNumber

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return "UPDATE users SET indicacao = ? WHERE username_key = ?", (self.indicacao, self.username_key)


class SetIP(UserAction):
    tag = "set-ip"
    legacy_tag = "atualizarIP"

    new_ip: LenientStr = Field(default="", validation_alias=AliasChoices("newIp", "new_ip", "novo_ip"))

    def statement(self) -> tuple[str, tuple[Any, ...]]:
        return "UPDATE users SET ip = ? WHERE username_key = ?", (self.new_ip, self.username_key)


ACTIONS: dict[str, type[UserAction]] = {}
for _cls in (CreateUser, SetPassword, SetBlocked, SetRenewal, SetReferral, SetIP):
    ACTIONS[_cls.tag] = _cls
    ACTIONS[_cls.legacy_tag] = _cls


def parse_action(payload: Any) -> tuple[str, UserAction]:
    """Select and validate the action variant for a decoded JSON body.

    Returns the action tag as sent together with the validated model.
    Raises ``user_admin.errors.ValidationError``; never touches the store.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request")

    tag = payload.get("action")
    model_cls = ACTIONS.get(tag) if isinstance(tag, str) else None
    if model_cls is None:
        raise ValidationError("Unknown action")

    try:
        return tag, model_cls.model_validate(payload)
    except PydanticValidationError as e:
        if any(err.get("loc", ())[:1] == ("indicacao",) for err in e.errors()):
            raise ValidationError("Invalid referral count") from e
        raise ValidationError("Invalid request") from e


class UserRecord(BaseModel):
    """A row of the users table as exposed by the API. Never carries the password."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    is_blocked: bool = Field(default=False, alias="isBlocked")
    renewal_date: str = Field(default="", alias="renewalDate")
    ip: Optional[str] = None
    indicacao: int = 0
