"""Debounce gate in front of the ROI service.

Reactive callers trigger a recalculation on every state change. The
controller drops a request when a run is already in flight or when the
previous run finished less than the minimum interval ago. Skipped requests
are not queued; the caller triggers again on its next change.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.core.financial.guard import ROIContext
from src.core.financial.models import InputData
from src.core.financial.results import ROIResults
from src.core.financial.service import ROIService

logger = logging.getLogger(__name__)


class ScheduleStatus(enum.StrEnum):
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED_RUNNING = "skipped_running"
    SKIPPED_DEBOUNCE = "skipped_debounce"


@dataclass(frozen=True)
class ScheduleOutcome:
    status: ScheduleStatus
    reason: str
    results: ROIResults | None = None

    @property
    def ran(self) -> bool:
        return self.status is ScheduleStatus.COMPLETED


class ROIController:
    """Serializes and rate-limits ROI runs for one application context.

    The minimum interval between runs defaults to the service settings'
    ``roi_min_rerun_ms``.
    """

    def __init__(
        self,
        service: ROIService,
        min_rerun_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        if min_rerun_seconds is None:
            min_rerun_seconds = service.settings.roi_min_rerun_seconds
        self._min_rerun_seconds = min_rerun_seconds
        self._clock = clock
        self._running = False
        self._ready = False
        self._last_run_at: float | None = None

    def schedule(
        self,
        reason: str,
        context: ROIContext,
        data: InputData,
        time_horizon_months: int | None = None,
    ) -> ScheduleOutcome:
        """Run the calculation unless it is blocked, in flight or debounced."""
        self._ready = self._service.can_run(context)
        if not self._ready:
            logger.info("ROI schedule blocked (%s)", reason)
            return ScheduleOutcome(ScheduleStatus.BLOCKED, reason)

        if self._running:
            logger.debug("ROI schedule skipped, already running (%s)", reason)
            return ScheduleOutcome(ScheduleStatus.SKIPPED_RUNNING, reason)

        now = self._clock()
        if self._last_run_at is not None and now - self._last_run_at < self._min_rerun_seconds:
            logger.debug(
                "ROI schedule debounced (%s): %.3fs since last run, threshold %.3fs",
                reason,
                now - self._last_run_at,
                self._min_rerun_seconds,
            )
            return ScheduleOutcome(ScheduleStatus.SKIPPED_DEBOUNCE, reason)

        self._running = True
        logger.info("Scheduling ROI (%s) for org=%s", reason, context.org_id)
        try:
            results = self._service.run(context, data, time_horizon_months)
        except Exception:
            logger.exception("ROI run failed (%s)", reason)
            raise
        finally:
            self._running = False
            self._last_run_at = self._clock()

        return ScheduleOutcome(ScheduleStatus.COMPLETED, reason, results)

    def reset(self) -> None:
        """Forget readiness and timing, e.g. when switching organizations."""
        self._running = False
        self._ready = False
        self._last_run_at = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "ready_for_roi": self._ready,
            "running": self._running,
            "last_run_at": self._last_run_at,
            "min_rerun_seconds": self._min_rerun_seconds,
        }
