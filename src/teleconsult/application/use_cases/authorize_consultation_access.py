"""Access gate: resolve a bearer token into a live consultation access session."""

import logging
from typing import Optional

from ...core.utils.datetime_utils import Clock, system_clock
from ...domain.entities.access_session import ConsultationAccessSession
from ...domain.errors import (
    ConsultationLinkMismatchError,
    ConsultationTokenExpiredError,
    ConsultationTokenInvalidError,
    ConsultationTokenRequiredError,
)
from ..dto.consultation_dto import AccessGrant
from ..ports.repositories.session_store import SessionStore

logger = logging.getLogger(__name__)


class ConsultationAccessGate:
    def __init__(
        self,
        access_store: SessionStore[ConsultationAccessSession],
        clock: Clock = system_clock,
        enabled: bool = True,
    ) -> None:
        self._access_store = access_store
        self._clock = clock
        self.enabled = enabled

    async def authorize(self, token: Optional[str], link_hash: Optional[str]) -> AccessGrant:
        """Checks run in order: presence, lookup, expiry, link binding."""
        if not token:
            raise ConsultationTokenRequiredError("No consultation token supplied")

        session = await self._access_store.get(token)
        if session is None:
            raise ConsultationTokenInvalidError("Unknown consultation token")

        if session.is_expired(self._clock()):
            await self._access_store.delete(token)
            raise ConsultationTokenExpiredError("Consultation token expired")

        if not link_hash or link_hash != session.link_hash:
            raise ConsultationLinkMismatchError("Link hash does not match the token's link")

        return AccessGrant(token=token, session=session)

    async def revoke(self, token: Optional[str]) -> bool:
        if not token:
            return False
        revoked = await self._access_store.delete(token)
        if revoked:
            logger.info("Consultation access token revoked")
        return revoked
