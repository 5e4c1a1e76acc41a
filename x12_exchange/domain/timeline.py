"""Stage timeline events recorded as execution diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured timeline event payload.

    Args:
        stage: Stage name (for example `resolve_partnership` or `deliver`).
        status: Stage status marker (`started`, `completed`, `failed`, `skipped`).
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        event_payload["details"] = details
    return event_payload


def domain_build_failed_stage_event(stage: str, error: BaseException) -> dict[str, object]:
    """Build a `failed` timeline event carrying the exception type and message.

    Args:
        stage: Stage name that failed.
        error: Exception raised by the stage.

    Returns:
        dict[str, object]: Structured failure timeline event.
    """

    return domain_build_stage_event(
        stage=stage,
        status="failed",
        details={
            "error_type": type(error).__name__,
            "error_code": getattr(error, "error_code", None),
            "error_message": str(error),
        },
    )
