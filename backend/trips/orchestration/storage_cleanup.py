"""Post-commit attachment cleanup for deleted components."""

from typing import Protocol
from uuid import UUID

from backend.trips.utils.logging import StructuredScheduleLogger
from backend.trips.utils.metrics import PrometheusScheduleMetrics


class AttachmentCleaner(Protocol):
    """Removes stored files (photos, documents) belonging to a component."""

    async def delete_component_attachments(self, component_id: UUID) -> None:
        """Delete every stored attachment of the component.

        Args:
            component_id: Component whose attachments are removed
        """
        ...


class NoopAttachmentCleaner:
    """Cleaner used when no attachment storage is configured."""

    async def delete_component_attachments(self, component_id: UUID) -> None:
        return None


async def cleanup_after_delete(
    cleaner: AttachmentCleaner | None,
    component_id: UUID,
    *,
    log: StructuredScheduleLogger,
    metrics: PrometheusScheduleMetrics,
) -> bool:
    """Run attachment cleanup once the delete is committed.

    Failures are logged and counted, never raised.

    Returns:
        True if cleanup ran without error (or there was nothing to run)
    """
    if cleaner is None:
        return True
    try:
        await cleaner.delete_component_attachments(component_id)
    except Exception as e:
        log.log_cleanup_failure(component_id, e)
        metrics.inc_cleanup_failure()
        return False
    return True
