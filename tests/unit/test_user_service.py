from __future__ import annotations

import pytest

from office_chat.services import user_service


@pytest.mark.asyncio
async def test_colleagues_exclude_caller_and_inactive(alice, db, uow):
    db.add_users(4)
    db.inactive_user_ids.add(3)

    colleagues = await user_service.list_colleagues(alice, uow)

    assert [u.id for u in colleagues] == [2, 4]
