"""HTTP client for the meal plan store.

Talks JSON to the ``/meal-plans`` and ``/recipes`` routes. Transport failures
and non-2xx responses surface as ``RemoteStoreError``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.config import settings
from app.exceptions import RemoteStoreError
from domain.mappers import MealPlanMapper
from domain.models import MealPlan

logger = logging.getLogger("smartplates.client")


class MealPlanApiClient:
    """
    Async client for the meal plan store.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (for example one
    bound to an ASGI app); otherwise one is created for ``base_url`` and closed
    by ``aclose``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.request_timeout_sec,
        )
        self._prefix = settings.api_prefix

    async def __aenter__(self) -> "MealPlanApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ---------- transport ----------

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self._prefix}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteStoreError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            message = response.reason_phrase or "request failed"
            try:
                body = response.json()
                error = body.get("error") if isinstance(body, dict) else None
                if isinstance(error, dict) and error.get("message"):
                    message = str(error["message"])
            except ValueError:
                pass
            raise RemoteStoreError(
                f"{method} {url} returned {response.status_code}: {message}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _data(response: httpx.Response) -> Any:
        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # ---------- meal plans ----------

    async def list_plans(self, user_id: str, start: date, end: date) -> List[MealPlan]:
        """Plans of ``user_id`` whose week overlaps ``start``..``end``."""
        response = await self._request(
            "GET",
            "/meal-plans",
            params={"userId": user_id, "from": start.isoformat(), "to": end.isoformat()},
        )
        return [MealPlanMapper.from_payload(doc) for doc in self._data(response) or []]

    async def get_plan(self, plan_id: str, user_id: str) -> Optional[MealPlan]:
        try:
            response = await self._request("GET", f"/meal-plans/{plan_id}", params={"userId": user_id})
        except RemoteStoreError as exc:
            if exc.status_code == 404:
                return None
            raise
        return MealPlanMapper.from_payload(self._data(response))

    async def create_plan(self, plan: MealPlan) -> Tuple[MealPlan, bool]:
        """Get-or-create the plan's week. Returns the stored plan and whether it is new."""
        payload = MealPlanMapper.to_payload(plan)
        payload.pop("_id", None)
        response = await self._request("POST", "/meal-plans", json=payload)
        return MealPlanMapper.from_payload(self._data(response)), response.status_code == 201

    async def update_plan(self, plan: MealPlan) -> MealPlan:
        if not plan.id:
            raise RemoteStoreError("Cannot update a plan that has no id")
        response = await self._request(
            "PUT",
            f"/meal-plans/{plan.id}",
            params={"userId": plan.user_id},
            json=MealPlanMapper.to_payload(plan),
        )
        return MealPlanMapper.from_payload(self._data(response))

    async def save_plan(self, plan: MealPlan) -> str:
        """
        Upsert the plan and return its id.

        A plan without id is created first; if the store already had a plan
        for that week, the local days are written over it.
        """
        if plan.id:
            try:
                return (await self.update_plan(plan)).id
            except RemoteStoreError as exc:
                if exc.status_code != 404:
                    raise
                logger.info("Plan %s vanished remotely, recreating week %s", plan.id, plan.week_key)
                plan.id = None

        stored, created = await self.create_plan(plan)
        plan.id = stored.id
        if not created:
            await self.update_plan(plan)
        return plan.id

    async def delete_plan(self, plan_id: str, user_id: str) -> bool:
        try:
            await self._request("DELETE", f"/meal-plans/{plan_id}", params={"userId": user_id})
        except RemoteStoreError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    async def generate_shopping_list(self, plan_id: str, user_id: str) -> Dict[str, Any]:
        response = await self._request(
            "POST", f"/meal-plans/{plan_id}/shopping-list", params={"userId": user_id}
        )
        return self._data(response)

    # ---------- recipes ----------

    async def get_recipe(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self._request("GET", f"/recipes/{recipe_id}")
        except RemoteStoreError as exc:
            if exc.status_code == 404:
                return None
            raise
        return self._data(response)
