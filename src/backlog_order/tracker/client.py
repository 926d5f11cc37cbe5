"""Azure Boards REST client for team backlogs and work item details."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from backlog_order.backlog.models import WorkItemDetail, WorkItemReference
from backlog_order.config import ValidatorConfig
from backlog_order.errors import ContractViolation, TrackerRequestError
from backlog_order.tracker.payloads import (
    parse_backlog_references,
    parse_work_item_detail,
)

_USER_AGENT = "backlog-order-check/1.0"


class AzureBoardsClient:
    """Thin blocking client; every call is a single GET with no retries."""

    def __init__(
        self,
        config: ValidatorConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "AzureBoardsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        query = {"api-version": self._config.api_version, **(params or {})}
        response = self._session.get(
            url,
            params=query,
            headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
            auth=("", self._config.token.value),
            timeout=self._config.timeout_seconds,
        )
        if response.status_code >= 400:
            raise TrackerRequestError(url=url, status_code=response.status_code)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ContractViolation(
                "source_schema_drift",
                key=url,
                detail="response body must be a JSON object",
            )
        return payload

    def backlog_url(self, backlog_level: str | None = None) -> str:
        level = backlog_level or self._config.backlog_level
        return (
            f"{self._config.organization_url}/{quote(self._config.project)}"
            f"/{quote(self._config.team)}/_apis/work/backlogs/{quote(level)}/workItems"
        )

    def work_item_url(self, item_id: int) -> str:
        return (
            f"{self._config.organization_url}/{quote(self._config.project)}"
            f"/_apis/wit/workitems/{int(item_id)}"
        )

    def fetch_backlog_references(
        self, backlog_level: str | None = None
    ) -> tuple[WorkItemReference, ...]:
        """Fetch the team backlog as work item references in rank order."""

        return parse_backlog_references(self._get_json(self.backlog_url(backlog_level)))

    def fetch_work_item(self, item_id: int) -> WorkItemDetail:
        """Fetch one work item with its relation links expanded."""

        payload = self._get_json(
            self.work_item_url(item_id), params={"$expand": "relations"}
        )
        detail = parse_work_item_detail(payload)
        if detail.item_id != int(item_id):
            raise ContractViolation(
                "source_schema_drift",
                key=str(item_id),
                detail=f"requested item {item_id} but received {detail.item_id}",
            )
        return detail
