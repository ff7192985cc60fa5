"""
Token issuance, token verification and bearer authentication for the API.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Header, Request

from api.config import APIConfig
from catalog.errors import UnauthorizedError
from utilities.logger import bind_request_context

logger = structlog.get_logger(__name__)

BEARER_SCHEME = "bearer"


class TokenService:
    """
    Issues and verifies signed, time-bounded identity tokens.

    Tokens are JWTs carrying ``sub``, ``iat`` and ``exp`` claims, signed with a
    pre-shared secret. Tokens are never revoked; they simply stop verifying
    once ``exp`` has passed.
    """

    def __init__(
        self,
        username: str,
        password: str,
        secret_key: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=24)
    ):
        self._username = username
        self._password = password
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_in = expires_in

    @classmethod
    def from_config(cls, config: APIConfig) -> "TokenService":
        """Build a token service from API settings."""
        return cls(
            username=config.auth_username,
            password=config.auth_password,
            secret_key=config.secret_key,
            algorithm=config.algorithm,
            expires_in=timedelta(hours=config.access_token_expire_hours),
        )

    @property
    def expires_in(self) -> int:
        """Token validity window in seconds."""
        return int(self._expires_in.total_seconds())

    def issue(self, username: str, password: str) -> str:
        """
        Check a credential pair and issue a token for it.

        Args:
            username: Presented username
            password: Presented password

        Returns:
            Encoded JWT string

        Raises:
            UnauthorizedError: If the pair does not match the configured one
        """
        # Compare both fields every time so timing does not reveal which one was wrong.
        username_ok = secrets.compare_digest(username.encode(), self._username.encode())
        password_ok = secrets.compare_digest(password.encode(), self._password.encode())
        if not (username_ok and password_ok):
            logger.warning("Token request rejected", username=username)
            raise UnauthorizedError("invalid credentials")

        now = datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "iat": int(now.timestamp()),
            "exp": int((now + self._expires_in).timestamp()),
        }

        logger.info("Token issued", subject=username)
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """
        Verify a token and return its subject.

        Args:
            token: Encoded JWT string

        Returns:
            The ``sub`` claim

        Raises:
            UnauthorizedError: If the token is malformed, signed with another
                algorithm, badly signed, expired, or has no subject
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") != self._algorithm:
                logger.warning("Unexpected signing algorithm", alg=header.get("alg"))
                raise UnauthorizedError("invalid or expired token")

            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token has expired")
            raise UnauthorizedError("invalid or expired token")
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token", error=str(e))
            raise UnauthorizedError("invalid or expired token")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.warning("Token has no usable subject")
            raise UnauthorizedError("invalid or expired token")

        return subject


class AccessGate:
    """Guards protected operations by requiring a valid bearer token."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def authenticate(self, authorization: Optional[str]) -> str:
        """
        Authenticate a raw ``Authorization`` header value.

        Args:
            authorization: Header value, expected as ``Bearer <token>``

        Returns:
            The verified subject

        Raises:
            UnauthorizedError: If the header is missing, malformed, or the
                token does not verify
        """
        if not authorization:
            raise UnauthorizedError("missing authorization header")

        parts = authorization.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
            raise UnauthorizedError("invalid authorization header format")

        return self.token_service.verify(parts[1])


async def require_subject(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> str:
    """
    FastAPI dependency for protected routes.

    Exposes the verified subject on ``request.state.subject`` and in the log
    context of the current request only.
    """
    gate: AccessGate = request.app.state.access_gate
    subject = gate.authenticate(authorization)

    request.state.subject = subject
    bind_request_context(subject=subject)
    return subject
