"""
Unit tests for the shared write-service reload step
"""

from uuid import uuid4

import pytest

from leaktrack.core.exceptions import StoreError
from leaktrack.services.base import BaseService


class RecordingSession:
    def __init__(self):
        self.expunged = []

    def expunge(self, obj):
        self.expunged.append(obj)


async def test_reload_detaches_written_rows_and_refetches():
    session = RecordingSession()
    row, machine = object(), object()
    fetched = object()
    row_id = uuid4()

    async def fetch(ident):
        assert ident == row_id
        assert session.expunged == [row, machine]
        return fetched

    result = await BaseService(session).reload(fetch, row_id, row, None, machine)

    assert result is fetched


async def test_reload_raises_store_error_when_row_is_missing():
    row_id = uuid4()

    async def fetch(ident):
        return None

    with pytest.raises(StoreError) as exc_info:
        await BaseService(RecordingSession()).reload(fetch, row_id)

    assert exc_info.value.status_code == 503
    assert exc_info.value.context == {"id": str(row_id)}
