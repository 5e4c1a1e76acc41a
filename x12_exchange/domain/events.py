"""Outbound event contract and transaction-set payload helpers.

Guide JSON is either a single transaction set object (`{heading, detail,
summary}`) or an ordered list of such objects. The helpers in this module
normalize both shapes to a list before inspecting the `ST` header.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidOutboundEventError, TransactionSetControlNumberError, TransactionSetTypeError

_ST_HEADER_KEY = "transaction_set_header_ST"
_ST_IDENTIFIER_CODE_KEY = "transaction_set_identifier_code_01"
_ST_CONTROL_NUMBER_KEY = "transaction_set_control_number_02"


class OutboundEventMetadata(BaseModel):
    """Routing metadata of one outbound business event.

    Attributes:
        sending_partner_id: Partner id of the sender.
        receiving_partner_id: Partner id of the receiver.
        transaction_set: Optional explicit transaction set type code (for example `850`).
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sending_partner_id: str = Field(alias="sendingPartnerId", min_length=1)
    receiving_partner_id: str = Field(alias="receivingPartnerId", min_length=1)
    transaction_set: str | None = Field(default=None, alias="transactionSet")

    @field_validator("sending_partner_id", "receiving_partner_id")
    @classmethod
    def _validate_partner_id(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("partner id must not be blank")
        return stripped_value

    @field_validator("transaction_set")
    @classmethod
    def _validate_transaction_set(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None


class OutboundEvent(BaseModel):
    """Validated outbound event.

    Attributes:
        metadata: Routing metadata.
        payload: Transaction set object, list of transaction set objects, or mapping input.
    """

    model_config = ConfigDict(populate_by_name=True)

    metadata: OutboundEventMetadata
    payload: dict[str, Any] | list[dict[str, Any]]

    @model_validator(mode="after")
    def _validate_single_transaction_set_type(self) -> OutboundEvent:
        identifier_codes = domain_collect_transaction_set_identifier_codes(self.payload)
        if len(identifier_codes) > 1:
            raise ValueError(
                f"payload contains more than one transaction set type: {sorted(identifier_codes)}"
            )
        return self


def domain_parse_outbound_event(raw_event: Any) -> OutboundEvent:
    """Validate one raw event against the outbound event contract.

    Args:
        raw_event: Untyped event body.

    Returns:
        OutboundEvent: Validated event.

    Raises:
        InvalidOutboundEventError: Raised when the event shape is invalid.
    """

    try:
        return OutboundEvent.model_validate(raw_event)
    except ValidationError as error:
        raise InvalidOutboundEventError(f"invalid outbound event: {error}") from error


def domain_normalize_transaction_sets(guide_json: Any) -> list[Any]:
    """Return guide JSON as an ordered list of transaction set objects.

    Args:
        guide_json: Single transaction set object or list of them.

    Returns:
        list[Any]: Ordered transaction set objects.
    """

    if isinstance(guide_json, list):
        return list(guide_json)
    return [guide_json]


def domain_collect_transaction_set_identifier_codes(guide_json: Any) -> set[str]:
    """Collect distinct embedded `ST01` identifier codes.

    Args:
        guide_json: Single transaction set object or list of them.

    Returns:
        set[str]: Distinct identifier codes; transaction sets without a code are ignored.
    """

    identifier_codes: set[str] = set()
    for transaction_set in domain_normalize_transaction_sets(guide_json):
        identifier_code = _domain_read_st_element(transaction_set, _ST_IDENTIFIER_CODE_KEY)
        if identifier_code is not None:
            identifier_codes.add(str(identifier_code))
    return identifier_codes


def domain_determine_transaction_set_type(event: OutboundEvent) -> str:
    """Return the transaction set type from metadata or the embedded `ST01` codes.

    Args:
        event: Validated outbound event.

    Returns:
        str: Transaction set type code.

    Raises:
        TransactionSetTypeError: Raised when the payload does not carry exactly one distinct code.
    """

    if event.metadata.transaction_set is not None:
        return event.metadata.transaction_set

    identifier_codes = domain_collect_transaction_set_identifier_codes(event.payload)
    if len(identifier_codes) != 1:
        raise TransactionSetTypeError("unable to determine transaction set type from input")
    return next(iter(identifier_codes))


def domain_validate_transaction_set_control_numbers(guide_json: Any) -> None:
    """Require the Nth transaction set to carry control number N.

    Control numbers may be strings or numbers; `"1"`, `"0001"` and `1` are
    all accepted for the first transaction set.

    Args:
        guide_json: Single transaction set object or list of them.

    Returns:
        None: Returns when the sequence is valid.

    Raises:
        TransactionSetControlNumberError: Raised on the first out-of-sequence control number.
    """

    for expected_control_number, transaction_set in enumerate(
        domain_normalize_transaction_sets(guide_json),
        start=1,
    ):
        raw_value = _domain_read_st_element(transaction_set, _ST_CONTROL_NUMBER_KEY)
        found_control_number = _domain_parse_control_number(raw_value)
        if found_control_number != expected_control_number:
            raise TransactionSetControlNumberError(
                "invalid control number for transaction set: "
                f"[expected: {expected_control_number}, found: {raw_value}]"
            )


def _domain_read_st_element(transaction_set: Any, element_key: str) -> Any:
    """Read one element of the `ST` header, returning None when any level is missing."""

    if not isinstance(transaction_set, dict):
        return None
    heading = transaction_set.get("heading")
    if not isinstance(heading, dict):
        return None
    st_header = heading.get(_ST_HEADER_KEY)
    if not isinstance(st_header, dict):
        return None
    return st_header.get(element_key)


def _domain_parse_control_number(raw_value: Any) -> float | None:
    """Parse a string or numeric control number; None when not numeric."""

    if isinstance(raw_value, bool) or raw_value is None:
        return None
    if isinstance(raw_value, (int, float)):
        return float(raw_value)
    if isinstance(raw_value, str):
        try:
            return float(raw_value.strip())
        except ValueError:
            return None
    return None
