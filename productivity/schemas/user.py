"""Pydantic schemas for users."""

from typing import Any

from pydantic import model_validator

from productivity.schemas.common import ApiModel


class UserResponse(ApiModel):
    """Public view of a user. Never includes password or token fields."""

    id: int
    username: str
    email: str
    full_name: str
    role: str

    @model_validator(mode="before")
    @classmethod
    def _flatten_role(cls, data: Any) -> Any:
        # ORM users carry a Role relationship; expose only its name
        role = getattr(data, "role", None)
        if role is not None and not isinstance(role, str):
            return {
                "id": data.id,
                "username": data.username,
                "email": data.email,
                "full_name": data.full_name,
                "role": role.name,
            }
        return data


class UserSummary(ApiModel):
    """Compact user reference embedded in other records."""

    id: int
    username: str
    full_name: str
