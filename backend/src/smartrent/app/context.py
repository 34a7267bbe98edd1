"""Application context: everything a handler needs that outlives a request.

Built once by ``create_app`` and stored on ``app.state.context``. Tests build
their own context (in-memory database, fake identity provider) instead of
patching module globals.
"""

import logging
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from smartrent.app.config import Settings
from smartrent.infra.database import create_engine, create_session_factory
from smartrent.services.auth_service import SessionTokens
from smartrent.services.credential_verifiers import (
    AuthenticationGateway,
    FederatedVerifier,
    IdentityProvider,
    LocalTokenVerifier,
)

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    tokens: SessionTokens
    gateway: AuthenticationGateway

    @classmethod
    def create(cls, settings: Settings, identity_provider: IdentityProvider | None = None) -> "AppContext":
        engine = create_engine(settings.database_url)
        tokens = SessionTokens(
            settings.jwt_secret_key,
            settings.jwt_algorithm,
            settings.jwt_expiration_minutes,
        )

        if identity_provider is None and settings.firebase_enabled:
            from smartrent.infra.firebase import FirebaseIdentityProvider

            try:
                identity_provider = FirebaseIdentityProvider(
                    settings.firebase_project_id,
                    settings.firebase_service_account_path,
                )
            except Exception as e:
                # Local session tokens keep working without Firebase
                logger.error("Firebase initialization failed, federated auth disabled: %s", e)

        gateway = AuthenticationGateway(
            federated=FederatedVerifier(identity_provider),
            local=LocalTokenVerifier(tokens),
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
            tokens=tokens,
            gateway=gateway,
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency: the application context."""
    return request.app.state.context
