from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.exceptions import StoreError

T = TypeVar("T")


class BaseService:
    """
    Base class for write services spanning several repositories.

    Writes end with a reload: freshly inserted objects are detached from the
    session and fetched again, so the returned row has every relation loaded
    while the session is still open.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def reload(
        self,
        fetch: Callable[[Any], Awaitable[Optional[T]]],
        row_id: Any,
        *detach: Any,
    ) -> T:
        """
        Expunge `detach` and return `await fetch(row_id)`.

        Raises:
            StoreError: the committed row could not be read back
        """
        for obj in detach:
            if obj is not None:
                self.session.expunge(obj)
        fresh = await fetch(row_id)
        if fresh is None:
            raise StoreError("Committed row could not be read back", {"id": str(row_id)})
        return fresh
