"""Firebase Admin identity provider used to verify federated ID tokens."""

import asyncio
import logging

import firebase_admin
from firebase_admin import auth, credentials

logger = logging.getLogger(__name__)

_APP_NAME = "smartrent"


class FirebaseIdentityProvider:
    """Verifies Firebase ID tokens against the configured project.

    ``verify`` returns the decoded claims (``uid``, ``email``, ``name``...) and
    raises whatever ``firebase_admin`` raises for invalid, expired or revoked
    tokens, or when Google's key endpoint is unreachable.
    """

    def __init__(self, project_id: str, service_account_path: str = ""):
        self.project_id = project_id
        self._app = self._initialize(project_id, service_account_path)

    @staticmethod
    def _initialize(project_id: str, service_account_path: str):
        try:
            return firebase_admin.get_app(_APP_NAME)
        except ValueError:
            pass

        cred = (
            credentials.Certificate(service_account_path)
            if service_account_path
            else credentials.ApplicationDefault()
        )
        app = firebase_admin.initialize_app(cred, {"projectId": project_id}, name=_APP_NAME)
        logger.info("Firebase Admin initialized for project %s", project_id)
        return app

    async def verify(self, token: str) -> dict:
        # verify_id_token may fetch Google's public keys over HTTP
        return await asyncio.to_thread(auth.verify_id_token, token, app=self._app)
