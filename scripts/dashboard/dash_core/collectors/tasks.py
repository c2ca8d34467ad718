"""Task service client and task list collector (fail-soft)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import requests

from dash_core.collectors import env_api_url, failed, first_line
from dash_core.errors import TaskServiceError
from dash_core.formatting import format_iso_timestamp
from dash_core.models import PanelData, Task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
TASKS_PATH = "/api/v1/tasks"


class TaskClient:
    """Thin JSON client for ``/api/v1/tasks``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or env_api_url()).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, task_id: str | None = None) -> str:
        if task_id is None:
            return f"{self.base_url}{TASKS_PATH}"
        return f"{self.base_url}{TASKS_PATH}/{task_id}"

    def _request(self, method: str, url: str, expected: int, payload: dict | None = None) -> Any:
        logger.debug("task request", extra={"fields": {"method": method, "url": url}})
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            raise TaskServiceError(f"task service timed out after {self.timeout:g}s") from exc
        except requests.RequestException as exc:
            raise TaskServiceError(f"task service unreachable: {exc}") from exc

        if response.status_code != expected:
            reason = first_line(response.text, response.reason or "error")
            raise TaskServiceError(
                f"unexpected status {response.status_code}: {reason}",
                status_code=response.status_code,
            )
        if expected == 204:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TaskServiceError(f"invalid JSON from task service: {exc}") from exc

    def list_tasks(self) -> list[Task]:
        payload = self._request("GET", self._url(), 200)
        if not isinstance(payload, list):
            raise TaskServiceError("task list response is not a JSON array")
        return [Task.from_dict(row) for row in payload if isinstance(row, dict)]

    def create_task(self, title: str, description: str = "") -> Task:
        body: dict[str, Any] = {"title": title}
        if description:
            body["description"] = description
        return Task.from_dict(self._request("POST", self._url(), 201, body) or {})

    def update_task(self, task_id: str, title: str, description: str = "", completed_at: datetime | None = None) -> Task:
        body: dict[str, Any] = {"title": title, "completed_at": format_iso_timestamp(completed_at)}
        if description:
            body["description"] = description
        return Task.from_dict(self._request("PUT", self._url(task_id), 200, body) or {})

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", self._url(task_id), 204)


def _task_item(task: Task) -> dict[str, Any]:
    item = task.to_dict()
    item["completed"] = task.completed
    return item


def collect(client: TaskClient, key: str = "tasks", title: str = "Tasks") -> PanelData:
    try:
        tasks = client.list_tasks()
    except TaskServiceError as exc:
        logger.warning("task fetch failed", extra={"fields": {"error": str(exc)}})
        return failed(key, title, str(exc), meta={"count": 0})

    done = sum(1 for task in tasks if task.completed)
    return PanelData(
        key=key,
        title=title,
        status="ok",
        items=[_task_item(task) for task in tasks],
        meta={"count": len(tasks), "completed": done},
        errors=[],
    )


def toggle(client: TaskClient, task: Task, key: str = "tasks", title: str = "Tasks") -> PanelData:
    completed_at = None if task.completed else datetime.now(timezone.utc)
    try:
        client.update_task(task.id, task.title, task.description, completed_at)
    except TaskServiceError as exc:
        return failed(key, title, f"toggle failed: {exc}")
    return collect(client, key, title)


def delete(client: TaskClient, task_id: str, key: str = "tasks", title: str = "Tasks") -> PanelData:
    try:
        client.delete_task(task_id)
    except TaskServiceError as exc:
        return failed(key, title, f"delete failed: {exc}")
    return collect(client, key, title)


def create(client: TaskClient, task_title: str = "New Task", key: str = "tasks", title: str = "Tasks") -> PanelData:
    try:
        client.create_task(task_title)
    except TaskServiceError as exc:
        return failed(key, title, f"create failed: {exc}")
    return collect(client, key, title)
