"""
Debounced, asynchronous saving of meal plans.

Each plan has at most one pending write. A newer ``save`` for the same plan
cancels the pending timer and starts a new one, so a burst of edits ends in a
single write carrying the plan's latest state. Writes never block the caller
and failures never roll back the in-memory plan: they only flip the plan's
save status to ``error`` until the next successful save. A plan stays
"unsaved" until a write of its latest state succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Set

from app.config import settings
from domain.enums import SaveStatus
from domain.models import MealPlan

logger = logging.getLogger("smartplates.persistence")

Writer = Callable[[MealPlan], Awaitable[Optional[str]]]
StatusListener = Callable[[str, SaveStatus], None]


class PersistenceBridge:
    """
    Pushes mutated plans to the remote store.

    Args:
        writer: coroutine function persisting a plan and returning its id
        debounce_sec: trailing debounce window per plan
        saved_reset_sec: how long ``saved`` is shown before reverting to ``idle``
        on_status: optional callback ``(week_key, status)`` for a save badge
    """

    def __init__(
        self,
        writer: Writer,
        debounce_sec: Optional[float] = None,
        saved_reset_sec: Optional[float] = None,
        on_status: Optional[StatusListener] = None,
    ):
        self._writer = writer
        self.debounce_sec = settings.save_debounce_sec if debounce_sec is None else debounce_sec
        self.saved_reset_sec = (
            settings.saved_status_reset_sec if saved_reset_sec is None else saved_reset_sec
        )
        self._on_status = on_status

        self._plans: Dict[str, MealPlan] = {}
        self._pending: Dict[str, asyncio.TimerHandle] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._rerun: Set[str] = set()
        self._deferred: Set[str] = set()
        self._dirty: Set[str] = set()
        self._resets: Dict[str, asyncio.TimerHandle] = {}

        self._statuses: Dict[str, SaveStatus] = {}
        self._errors: Dict[str, str] = {}
        self.status: SaveStatus = SaveStatus.IDLE
        self.last_error: Optional[str] = None

    # ---------- public API ----------

    def save(self, plan: MealPlan) -> None:
        """
        Schedule a write of ``plan`` after the debounce window.

        Called outside a running event loop, the write is deferred until the
        next ``flush``.
        """
        key = plan.week_key
        self._plans[key] = plan
        self._dirty.add(key)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._deferred.add(key)
            logger.debug("No running loop, deferring save for week %s", key)
            return
        self._deferred.discard(key)
        handle = self._pending.pop(key, None)
        if handle is not None:
            handle.cancel()
            logger.debug("Replaced pending save for week %s", key)
        self._pending[key] = loop.call_later(self.debounce_sec, self._start_write, key)

    def status_for(self, plan_or_key) -> SaveStatus:
        key = plan_or_key.week_key if isinstance(plan_or_key, MealPlan) else str(plan_or_key)
        return self._statuses.get(key, SaveStatus.IDLE)

    def error_for(self, plan_or_key) -> Optional[str]:
        key = plan_or_key.week_key if isinstance(plan_or_key, MealPlan) else str(plan_or_key)
        return self._errors.get(key)

    def has_pending(self, plan: Optional[MealPlan] = None) -> bool:
        if plan is None:
            return bool(self._pending or self._inflight or self._deferred)
        key = plan.week_key
        return key in self._pending or key in self._inflight or key in self._deferred

    def has_unsaved_changes(self, plan: MealPlan) -> bool:
        """True from the first ``save`` of a plan until a write of its latest state succeeds."""
        return plan.week_key in self._dirty or self.has_pending(plan)

    async def flush(self) -> None:
        """Write every pending or deferred plan now and wait for all writes to finish."""
        for key in list(self._pending):
            self._pending.pop(key).cancel()
            self._start_write(key)
        for key in list(self._deferred):
            self._start_write(key)
        while self._inflight:
            await asyncio.gather(*list(self._inflight.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Drop pending (not yet started) writes and wait for running ones."""
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        self._deferred.clear()
        self._rerun.clear()
        for handle in self._resets.values():
            handle.cancel()
        self._resets.clear()
        if self._inflight:
            await asyncio.gather(*list(self._inflight.values()), return_exceptions=True)

    # ---------- internals ----------

    def _start_write(self, key: str) -> None:
        self._pending.pop(key, None)
        self._deferred.discard(key)
        if key in self._inflight:
            # Write again once the running one completes, with the newest state.
            self._rerun.add(key)
            return
        task = asyncio.get_running_loop().create_task(self._write(key))
        self._inflight[key] = task

    async def _write(self, key: str) -> None:
        plan = self._plans[key]
        self._set_status(key, SaveStatus.SAVING)
        try:
            plan_id = await self._writer(plan)
        except Exception as exc:
            logger.warning("Saving plan for week %s failed: %s", key, exc)
            self._errors[key] = str(exc) or exc.__class__.__name__
            self._set_status(key, SaveStatus.ERROR)
        else:
            if plan_id and not plan.id:
                plan.id = plan_id
            self._errors.pop(key, None)
            if not (key in self._pending or key in self._rerun or key in self._deferred):
                self._dirty.discard(key)
            self._set_status(key, SaveStatus.SAVED)
            self._schedule_reset(key)
            logger.info("Saved plan %s for week %s", plan.id, key)
        finally:
            self._inflight.pop(key, None)
            if key in self._rerun:
                self._rerun.discard(key)
                self._start_write(key)

    def _schedule_reset(self, key: str) -> None:
        previous = self._resets.pop(key, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._resets[key] = loop.call_later(self.saved_reset_sec, self._reset_status, key)

    def _reset_status(self, key: str) -> None:
        self._resets.pop(key, None)
        if self._statuses.get(key) == SaveStatus.SAVED:
            self._set_status(key, SaveStatus.IDLE)

    def _set_status(self, key: str, status: SaveStatus) -> None:
        self._statuses[key] = status
        self.status = status
        self.last_error = self._errors.get(key) if status == SaveStatus.ERROR else None
        if self._on_status is not None:
            self._on_status(key, status)
