from __future__ import annotations

import pytest

from taskboard.client.availability import DebouncedEmailCheck
from taskboard.client.errors import NetworkError


@pytest.mark.asyncio
async def test_only_the_last_value_is_checked() -> None:
    checked: list[str] = []

    async def check(email: str) -> bool:
        checked.append(email)
        return email != "taken@example.com"

    debounced = DebouncedEmailCheck(check, delay=0.01)
    debounced.schedule("t")
    debounced.schedule("taken@")
    debounced.schedule("taken@example.com")

    assert await debounced.wait() is False
    assert checked == ["taken@example.com"]
    assert debounced.available is False


@pytest.mark.asyncio
async def test_cancel_prevents_lookup() -> None:
    checked: list[str] = []

    async def check(email: str) -> bool:
        checked.append(email)
        return True

    debounced = DebouncedEmailCheck(check, delay=0.01)
    debounced.schedule("someone@example.com")
    debounced.cancel()

    assert await debounced.wait() is None
    assert checked == []


@pytest.mark.asyncio
async def test_failed_lookup_leaves_state_unknown() -> None:
    async def check(email: str) -> bool:
        raise NetworkError("Network Error")

    debounced = DebouncedEmailCheck(check, delay=0)
    debounced.schedule("x@example.com")

    assert await debounced.wait() is None
    assert debounced.available is None
