# app/services/users_service.py

import asyncio
from typing import Dict, List, Optional
from uuid import UUID

from app.config import demo_delay_seconds
from app.schemas.user import User


class UserData:
    """
    Fixed in-memory user dataset with an artificial delay on every read,
    standing in for a slow downstream the cache is meant to shield.
    `calls` counts reads so callers can tell a live run from a cache hit.
    """

    def __init__(self, delay_seconds: Optional[float] = None):
        self.delay_seconds = demo_delay_seconds() if delay_seconds is None else delay_seconds
        self.calls = 0
        self._users: Dict[UUID, User] = {
            UUID("5acdbd58-14da-4048-8f1f-83359eca16bd"): User(Id=1, Name="Jerson"),
            UUID("d9cd3c26-e5d6-45b8-b3df-fe80cc67ae17"): User(Id=2, Name="Brito"),
            UUID("e9889f44-5791-4061-aab1-fd1bd8d41cb1"): User(Id=3, Name="Tonho"),
            UUID("c9cae7ec-5761-4873-a855-6b1edba0482c"): User(Id=4, Name="Fulano", IsActive=False),
            UUID("e0affce2-c4d4-45df-aacc-4dd339bccb1e"): User(Id=5, Name="Cicrano", IsActive=False),
        }

    async def _delay(self) -> None:
        self.calls += 1
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    async def get_all(self) -> List[User]:
        await self._delay()
        return list(self._users.values())

    async def get_all_actives(self) -> List[User]:
        await self._delay()
        return [u for u in self._users.values() if u.IsActive]

    async def get_all_inactives(self) -> List[User]:
        await self._delay()
        return [u for u in self._users.values() if not u.IsActive]

    async def get_by_id(self, uuid: UUID) -> Optional[User]:
        await self._delay()
        return self._users.get(uuid)


# Singleton accessor
_data: Optional[UserData] = None

def get_user_data() -> UserData:
    global _data
    if _data is None:
        _data = UserData()
    return _data
