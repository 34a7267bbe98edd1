"""Authentication gateway: ordered chain of credential verifiers.

A bearer token may be either a Firebase ID token or a local session token.
Verifiers are tried in order and each reports a typed ``VerificationResult``;
the gateway decides what to do with it:

- ``ACCEPTED``: the token resolved to a local user, stop.
- ``UNREGISTERED``: the token is valid but no local user exists, stop with 404.
- ``REJECTED`` / ``SKIPPED``: try the next verifier.
- ``STORAGE_ERROR``: the user lookup itself failed, stop with 500.

Falling through from a rejected Firebase token to the local verifier lets
clients that still hold a local session token keep working while both kinds
of credential are in circulation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smartrent.domain.errors import (
    InvalidCredential,
    MissingCredential,
    StorageUnavailable,
    UnregisteredPrincipal,
)
from smartrent.domain.models import User
from smartrent.services.auth_service import SessionTokens, get_user_by_email, get_user_by_id

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to a request."""

    user_id: str
    role: str
    email: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    landlord_id: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            email=user.email,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            landlord_id=user.landlord_id,
        )


@dataclass(frozen=True)
class FederatedIdentity:
    """Claims of a verified Firebase token, before any local user exists."""

    uid: str
    email: str
    name: str = ""


class VerificationStatus(str, Enum):
    ACCEPTED = "accepted"
    UNREGISTERED = "unregistered"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    STORAGE_ERROR = "storage_error"


@dataclass
class VerificationResult:
    status: VerificationStatus
    verifier: str
    user: User | None = None
    reason: str = ""
    claims: dict = field(default_factory=dict)


class IdentityProvider(Protocol):
    async def verify(self, token: str) -> dict: ...


class CredentialVerifier(Protocol):
    name: str

    async def verify(self, token: str, db: AsyncSession) -> VerificationResult: ...


class FederatedVerifier:
    """Verifies Firebase ID tokens and resolves the local user by email."""

    name = "federated"

    def __init__(self, provider: IdentityProvider | None):
        self.provider = provider

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    async def verify_identity(self, token: str) -> FederatedIdentity:
        """Verify the token only. Raises on any provider failure."""
        claims = await self.provider.verify(token)
        return FederatedIdentity(
            uid=claims["uid"],
            email=claims.get("email", ""),
            name=claims.get("name", ""),
        )

    async def verify(self, token: str, db: AsyncSession) -> VerificationResult:
        if not self.enabled:
            return VerificationResult(VerificationStatus.SKIPPED, self.name, reason="not configured")

        try:
            identity = await self.verify_identity(token)
        except Exception as e:
            # Malformed, expired or revoked token, or provider unreachable
            return VerificationResult(VerificationStatus.REJECTED, self.name, reason=str(e))

        if not identity.email:
            return VerificationResult(VerificationStatus.REJECTED, self.name, reason="token has no email claim")

        try:
            user = await get_user_by_email(db, identity.email)
        except SQLAlchemyError as e:
            logger.error("User lookup failed for federated identity %s: %s", identity.uid, e)
            return VerificationResult(VerificationStatus.STORAGE_ERROR, self.name, reason=str(e))

        claims = {"uid": identity.uid, "email": identity.email}
        if user is None:
            return VerificationResult(VerificationStatus.UNREGISTERED, self.name, claims=claims)
        return VerificationResult(VerificationStatus.ACCEPTED, self.name, user=user, claims=claims)


class LocalTokenVerifier:
    """Verifies self-issued session tokens and re-fetches the user they name."""

    name = "local"

    def __init__(self, tokens: SessionTokens):
        self.tokens = tokens

    async def verify(self, token: str, db: AsyncSession) -> VerificationResult:
        payload = self.tokens.decode(token)
        if not payload or "sub" not in payload:
            return VerificationResult(VerificationStatus.REJECTED, self.name, reason="invalid or expired token")

        try:
            user = await get_user_by_id(db, payload["sub"])
        except SQLAlchemyError as e:
            logger.error("User lookup failed for session token subject %s: %s", payload["sub"], e)
            return VerificationResult(VerificationStatus.STORAGE_ERROR, self.name, reason=str(e))

        if user is None:
            return VerificationResult(VerificationStatus.REJECTED, self.name, reason="user no longer exists")
        return VerificationResult(VerificationStatus.ACCEPTED, self.name, user=user, claims=payload)


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredential()
    token = authorization.removeprefix(BEARER_PREFIX).strip()
    if not token:
        raise MissingCredential()
    return token


class AuthenticationGateway:
    """Runs the verifier chain and turns the outcome into a Principal or an error."""

    def __init__(self, federated: FederatedVerifier, local: LocalTokenVerifier):
        self.federated = federated
        self.local = local
        self.verifiers: list[CredentialVerifier] = [federated, local]

    async def authenticate(self, authorization: str | None, db: AsyncSession) -> Principal:
        token = extract_bearer_token(authorization)

        for verifier in self.verifiers:
            result = await verifier.verify(token, db)

            if result.status == VerificationStatus.ACCEPTED:
                return Principal.from_user(result.user)

            if result.status == VerificationStatus.UNREGISTERED:
                logger.info("Verified %s identity has no local user: %s", result.verifier, result.claims.get("email"))
                raise UnregisteredPrincipal()

            if result.status == VerificationStatus.STORAGE_ERROR:
                raise StorageUnavailable("Failed to look up user")

            if result.status == VerificationStatus.REJECTED:
                logger.debug("%s verifier rejected token: %s", result.verifier, result.reason)

        raise InvalidCredential()

    async def identity_only(self, authorization: str | None) -> FederatedIdentity:
        """Verify a Firebase token without requiring a local user record."""
        token = extract_bearer_token(authorization)
        if not self.federated.enabled:
            raise InvalidCredential("Federated authentication not configured")
        try:
            return await self.federated.verify_identity(token)
        except Exception as e:
            logger.info("Firebase token verification failed: %s", e)
            raise InvalidCredential("Invalid Firebase token")
