from __future__ import annotations

from fastapi.testclient import TestClient

from taskboard import models  # noqa: F401
from taskboard.core.database import Base, engine

PASSWORD = "correct-horse"


async def reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def register(client: TestClient, email: str, name: str = "Test User") -> dict[str, str]:
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
