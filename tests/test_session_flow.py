from __future__ import annotations

import httpx
import pytest

from taskboard.client.api import TaskboardClient
from taskboard.client.errors import Forbidden
from taskboard.client.session import TaskSession
from taskboard.core.database import engine
from taskboard.main import app

from .helpers import PASSWORD, reset_schema


@pytest.mark.asyncio
async def test_session_against_the_app() -> None:
    await reset_schema()
    transport = httpx.ASGITransport(app=app)
    try:
        async with TaskboardClient("http://testserver/api", transport=transport) as owner, \
                TaskboardClient("http://testserver/api", transport=transport) as other:
            await owner.register(name="Owner", email="owner@example.com", password=PASSWORD)
            for i in range(25):
                await owner.create_task(title=f"Task {i}", status="completed" if i % 2 else "pending")
            await other.register(name="Other", email="other@example.com", password=PASSWORD)
            foreign = await other.create_task(title="Not yours")

            session = await TaskSession.sign_in(owner, email="owner@example.com", password=PASSWORD)
            assert len(session.all_tasks) == 10
            assert session.has_next_page

            await session.scroll.fetch_next_page()
            await session.scroll.fetch_next_page()
            assert len(session.all_tasks) == 25
            assert not session.has_next_page
            loaded = session.all_tasks

            await session.set_filter(status="completed")
            assert {t.status.value for t in session.tasks} == {"completed"}
            assert len(session.all_tasks) == 10

            assert await session.clear_filters() is False
            assert session.all_tasks == loaded

            created = await session.create_task("Fresh one")
            assert session.all_tasks[0].id == created.id
            assert len(session.all_tasks) == 26

            await session.update_task(created.id, status="in_progress")
            assert session.cache.get(created.id).status.value == "in_progress"

            await session.delete_task(created.id)
            assert session.cache.get(created.id) is None

            with pytest.raises(Forbidden):
                await session.update_task(foreign.id, title="Mine now")
            assert isinstance(session.errors["update"], Forbidden)
            assert (await other.get_task(foreign.id)).title == "Not yours"
    finally:
        await engine.dispose()
