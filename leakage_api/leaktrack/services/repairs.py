from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.exceptions import NotFoundError, PhotoUploadError
from leaktrack.db.base import utcnow
from leaktrack.db.models.inspection import STATUS_COMPLETED, RepairRecord
from leaktrack.db.models.security import Profile
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.services.base import BaseService
from leaktrack.services.storage import PhotoStorage

logger = logging.getLogger(__name__)


def photo_object_name(repairman_id: UUID, inspection_id: UUID, filename: Optional[str], stamp: int) -> str:
    """Storage path for a repair photo: <repairman>/<inspection>-<millis><ext>."""
    ext = PurePosixPath(filename or "").suffix.lower() or ".jpg"
    return f"{repairman_id}/{inspection_id}-{stamp}{ext}"


class RepairService(BaseService):
    """
    Repairman-side writes.

    Inserting a repair completes its inspection in the same transaction. A
    failed photo upload is not fatal: the repair is stored without a photo URL.
    """

    def __init__(self, session: AsyncSession, storage: PhotoStorage) -> None:
        super().__init__(session)
        self.storage = storage
        self.inspections = InspectionRepository(session)

    async def _upload_photo(
        self, repairman: Profile, inspection_id: UUID, filename: Optional[str], data: bytes
    ) -> Optional[str]:
        stamp = int(utcnow().timestamp() * 1000)
        name = photo_object_name(repairman.id, inspection_id, filename, stamp)
        try:
            return await self.storage.save(name, data)
        except PhotoUploadError as exc:
            logger.warning("Photo upload failed, continuing without photo: %s", exc)
            return None

    # PUBLIC_INTERFACE
    async def submit(
        self,
        *,
        inspection_id: UUID,
        repairman: Profile,
        repair_status: str,
        notes: Optional[str],
        photo_filename: Optional[str] = None,
        photo_data: Optional[bytes] = None,
    ) -> RepairRecord:
        """
        Store a repair for an inspection and mark the inspection Completed.

        Raises:
            NotFoundError: the inspection does not exist
        """
        inspection = await self.inspections.get_inspection(inspection_id)
        if inspection is None:
            raise NotFoundError("Inspection not found", {"inspection_id": str(inspection_id)})

        photo_url = None
        if photo_data:
            photo_url = await self._upload_photo(repairman, inspection_id, photo_filename, photo_data)

        now = utcnow()
        repair = await self.inspections.create_repair(
            inspection_id=inspection.id,
            repairman_id=repairman.id,
            repair_status=repair_status,
            notes=notes,
            photo_url=photo_url,
            started_at=now,
            completed_at=now,
        )
        inspection.status = STATUS_COMPLETED
        await self.inspections.commit()
        logger.info("Repair %s recorded for inspection %s (%s)", repair.id, inspection.id, repair_status)

        return await self.reload(self.inspections.get_repair, repair.id, repair, inspection)
