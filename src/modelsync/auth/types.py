"""Authorization mechanisms understood by the backend."""
from __future__ import annotations

from enum import Enum


class AuthorizationType(Enum):
    """A credential mechanism that can be used to authorize a request."""

    API_KEY = "API_KEY"
    AWS_IAM = "AWS_IAM"
    OPENID_CONNECT = "OPENID_CONNECT"
    AMAZON_COGNITO_USER_POOLS = "AMAZON_COGNITO_USER_POOLS"
    AWS_LAMBDA = "AWS_LAMBDA"
    NONE = "NONE"

    @property
    def carries_identity(self) -> bool:
        """Return True if requests authorized this way carry user claims."""
        return self in (
            AuthorizationType.AMAZON_COGNITO_USER_POOLS,
            AuthorizationType.OPENID_CONNECT,
        )

    @classmethod
    def parse(cls, value: str) -> "AuthorizationType":
        """Look up a member by value, case-insensitively.

        Raises
        ------
        ValueError
            If *value* does not name an authorization type.
        """
        normalized = value.strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        available = ", ".join(m.value for m in cls)
        raise ValueError(
            f"Unknown authorization type {value!r}. Available types: {available}"
        )
