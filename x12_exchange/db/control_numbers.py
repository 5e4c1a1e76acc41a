"""Database service issuing interchange and group control numbers."""

from __future__ import annotations

from typing import Final

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from x12_exchange.domain.errors import ControlNumberIssueError

from .interfaces import ControlNumberIssuerPort

_ISSUABLE_SEGMENTS: Final[frozenset[str]] = frozenset({"ISA", "GS"})


class SQLAlchemyControlNumberService(ControlNumberIssuerPort):
    """Control number issuer backed by a single-statement counter upsert.

    Each (segment, usage indicator, sender, receiver) scope owns one counter
    row. The increment and read happen in one `INSERT ... ON CONFLICT ...
    RETURNING` statement, so concurrent callers never observe the same value.
    Issued numbers are never returned to the pool.
    """

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_control_number_issue(
        self,
        segment: str,
        usage_indicator_code: str,
        sending_partner_id: str,
        receiving_partner_id: str,
    ) -> int:
        """Issue the next control number for one scope.

        Args:
            segment: `ISA` or `GS`.
            usage_indicator_code: Interchange usage indicator.
            sending_partner_id: Sending partner identifier.
            receiving_partner_id: Receiving partner identifier.

        Returns:
            int: Issued value; the first value for a new scope is 1.

        Raises:
            ValueError: Raised for unknown segments or blank scope values.
            ControlNumberIssueError: Raised when the counter cannot be advanced.
        """

        normalized_segment = segment.strip().upper()
        if normalized_segment not in _ISSUABLE_SEGMENTS:
            raise ValueError(f"segment must be one of: {', '.join(sorted(_ISSUABLE_SEGMENTS))}")
        scope_values = {
            "usage_indicator_code": usage_indicator_code.strip(),
            "sending_partner_id": sending_partner_id.strip(),
            "receiving_partner_id": receiving_partner_id.strip(),
        }
        for field_name, field_value in scope_values.items():
            if not field_value:
                raise ValueError(f"{field_name} must not be blank")

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "INSERT INTO control_number ("
                        "segment, usage_indicator_code, sending_partner_id, receiving_partner_id, "
                        "last_value, updated_at_utc"
                        ") VALUES ("
                        ":segment, :usage_indicator_code, :sending_partner_id, :receiving_partner_id, 1, now()"
                        ") "
                        "ON CONFLICT (segment, usage_indicator_code, sending_partner_id, receiving_partner_id) "
                        "DO UPDATE SET "
                        "last_value = control_number.last_value + 1, "
                        "updated_at_utc = now() "
                        "RETURNING last_value"
                    ),
                    {"segment": normalized_segment, **scope_values},
                ).mappings().one()
        except SQLAlchemyError as error:
            raise ControlNumberIssueError(
                f"failed to issue {normalized_segment} control number for "
                f"{scope_values['sending_partner_id']} -> {scope_values['receiving_partner_id']}"
            ) from error

        return int(row["last_value"])
