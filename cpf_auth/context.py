from __future__ import annotations

import logging
import threading

from cpf_auth.cognito_util import CognitoConfig, CognitoTokenValidator, IdentityClient
from cpf_auth.db.session import Database
from cpf_auth.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class AppContext:
    """
    Resources shared by every invocation handled by this process.

    Each collaborator is built on first use, so an authorizer-only process
    never opens a database pool and an issuance-only process never fetches
    JWKS. Pass prebuilt collaborators to substitute them (tests).

    First use is serialized, so concurrent requests (FastAPI threadpool)
    share one instance of each collaborator.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cognito_config: CognitoConfig | None = None,
        database: Database | None = None,
        identity: IdentityClient | None = None,
        validator: CognitoTokenValidator | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._cognito_config = cognito_config
        self._database = database
        self._identity = identity
        self._validator = validator
        # Reentrant: identity and validator build cognito_config under the lock.
        self._lock = threading.RLock()

    @property
    def cognito_config(self) -> CognitoConfig:
        with self._lock:
            if self._cognito_config is None:
                self._cognito_config = CognitoConfig.from_environ()
            return self._cognito_config

    @property
    def database(self) -> Database:
        with self._lock:
            if self._database is None:
                self._database = Database(self.settings)
            return self._database

    @property
    def identity(self) -> IdentityClient:
        with self._lock:
            if self._identity is None:
                self._identity = IdentityClient(self.cognito_config)
            return self._identity

    @property
    def validator(self) -> CognitoTokenValidator:
        with self._lock:
            if self._validator is None:
                self._validator = CognitoTokenValidator(self.cognito_config)
            return self._validator

    def close(self) -> None:
        """Release the database pool. Safe to call more than once."""
        with self._lock:
            if self._database is not None:
                self._database.dispose()
        logger.debug("App context closed")
