"""Async HTTP client for the Taskboard API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from taskboard.client.errors import NetworkError, error_from_response
from taskboard.client.models import CachedTask, TaskListPage
from taskboard.schemas.auth import AuthResponse, EmailAvailability, UserProfile
from taskboard.schemas.task import TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_PER_PAGE = 10


class TaskboardClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Connection failures are retried once by the transport; anything still
    failing is raised as ``NetworkError``. Error statuses become the matching
    ``ApiError`` subclass.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        retries: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
            headers={"Accept": "application/json"},
        )
        self.token = token

    @property
    def token(self) -> Optional[str]:
        return self._token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self._token = value
        if value:
            self._client.headers["Authorization"] = f"Bearer {value}"
        else:
            self._client.headers.pop("Authorization", None)

    async def __aenter__(self) -> "TaskboardClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("api event=network_error method=%s url=%s error=%r", method, url, exc)
            raise NetworkError(str(exc) or "Network Error") from exc
        if response.is_error:
            raise error_from_response(response)
        return response

    # -- tasks -----------------------------------------------------------

    async def list_tasks(
        self,
        *,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> TaskListPage:
        params: dict[str, Any] = {"page": page, "per_page": per_page}
        if search:
            params["search"] = search
        if status:
            params["status"] = TaskStatus(status).value
        response = await self._request("GET", "/tasks", params=params)
        return TaskListPage.model_validate(response.json())

    async def get_task(self, task_id: int) -> CachedTask:
        response = await self._request("GET", f"/tasks/{task_id}")
        return CachedTask.model_validate(response.json())

    async def create_task(
        self,
        *,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> CachedTask:
        payload: dict[str, Any] = {"title": title, "description": description}
        if status:
            payload["status"] = TaskStatus(status).value
        response = await self._request("POST", "/tasks", json=payload)
        return CachedTask.model_validate(response.json())

    async def update_task(self, task_id: int, **fields: Any) -> CachedTask:
        payload = {k: (v.value if isinstance(v, TaskStatus) else v) for k, v in fields.items()}
        response = await self._request("PUT", f"/tasks/{task_id}", json=payload)
        return CachedTask.model_validate(response.json())

    async def delete_task(self, task_id: int) -> str:
        response = await self._request("DELETE", f"/tasks/{task_id}")
        return response.json().get("message", "")

    # -- auth ------------------------------------------------------------

    async def register(self, *, name: str, email: str, password: str) -> UserProfile:
        response = await self._request(
            "POST", "/auth/register", json={"name": name, "email": email, "password": password}
        )
        auth = AuthResponse.model_validate(response.json())
        self.token = auth.token
        return auth.user

    async def login(self, *, email: str, password: str) -> UserProfile:
        response = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        auth = AuthResponse.model_validate(response.json())
        self.token = auth.token
        return auth.user

    async def logout(self) -> None:
        try:
            await self._request("POST", "/auth/logout")
        finally:
            self.token = None

    async def me(self) -> UserProfile:
        response = await self._request("GET", "/auth/me")
        return UserProfile.model_validate(response.json())

    async def update_profile(self, *, name: Optional[str] = None, email: Optional[str] = None) -> UserProfile:
        payload = {k: v for k, v in {"name": name, "email": email}.items() if v is not None}
        response = await self._request("PUT", "/auth/profile", json=payload)
        return UserProfile.model_validate(response.json()["user"])

    async def check_email(self, email: str) -> EmailAvailability:
        response = await self._request("POST", "/auth/check-email", json={"email": email})
        return EmailAvailability.model_validate(response.json())
