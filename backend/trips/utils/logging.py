"""Structured logging for schedule generation and component lifecycle."""

import logging
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


class StructuredScheduleLogger:
    """Structured logger for derived-schedule passes and post-commit hooks."""

    def log_generation(
        self,
        kind: str,
        parent_id: UUID,
        *,
        created: int,
        deleted: int,
        timings_ms: dict[str, float],
        target_ms: int | None = None,
    ) -> None:
        """Log a completed generation pass with per-step timings."""
        total_ms = sum(timings_ms.values())
        log_data: dict[str, Any] = {
            "kind": kind,
            "parent_id": str(parent_id),
            "created": created,
            "deleted": deleted,
            "timings_ms": {step: round(ms, 2) for step, ms in timings_ms.items()},
            "total_ms": round(total_ms, 2),
        }

        log_msg = f"Schedule generation: {kind} - {created} created, {deleted} deleted"

        if target_ms is not None and total_ms > target_ms:
            logger.warning(f"{log_msg} (over {target_ms}ms target)", extra={"structured": log_data})
        else:
            logger.debug(log_msg, extra={"structured": log_data})

    def log_skip_delete_override(self, kind: str, parent_id: UUID) -> None:
        logger.debug(
            f"skip_delete ignored for {kind}: existing children found",
            extra={"structured": {"kind": kind, "parent_id": str(parent_id)}},
        )

    def log_cleanup_failure(self, component_id: UUID, error: Exception) -> None:
        """Log a failed post-commit attachment cleanup."""
        logger.warning(
            f"Attachment cleanup failed for component {component_id}",
            extra={
                "structured": {
                    "component_id": str(component_id),
                    "error_type": type(error).__name__,
                    "error": str(error),
                }
            },
        )
