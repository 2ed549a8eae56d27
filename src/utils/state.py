from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from api.endpoints import ShopApi
from api.models import AuthData, Envelope, UserSummary


@dataclass
class GlobalState:
    """
    Application state shared by screens.

    Fields:
      - api: endpoint groups, owns the session store
      - user: summary of the signed in user, None while signed out
    """

    api: ShopApi = field(default_factory=ShopApi.create)
    user: Optional[UserSummary] = None

    @property
    def role(self) -> Optional[str]:
        if self.user is None:
            return None
        return "staff" if self.user.is_staff else "customer"

    async def restore_session(self) -> Optional[UserSummary]:
        """Pick up a session kept from a previous run, if its token is still stored."""
        if not await self.api.auth.is_authenticated():
            return None
        self.user = await self.api.auth.get_current_user()
        return self.user

    async def start_session(self, envelope: Envelope[AuthData]) -> UserSummary:
        """
        Persist what login/register returned.
        The auth endpoints leave this to their caller.
        """
        await self.api.session.set_session(envelope.data.token, envelope.data.user)
        self.user = envelope.data.user
        return self.user

    async def end_session(self) -> None:
        await self.api.auth.logout()
        self.user = None
