"""Interchange (ISA) and functional group (GS) envelope construction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from .errors import FunctionalIdentifierCodeError
from .partnership import PartnerProfile

# GS01 functional identifier code per X12 transaction set.
FUNCTIONAL_IDENTIFIER_CODES: Final[dict[str, str]] = {
    "180": "AN",
    "204": "SM",
    "210": "IM",
    "211": "BL",
    "214": "QM",
    "270": "HS",
    "271": "HB",
    "276": "HR",
    "277": "HN",
    "278": "HI",
    "810": "IN",
    "812": "CD",
    "820": "RA",
    "824": "AG",
    "830": "PS",
    "832": "SC",
    "834": "BE",
    "835": "HP",
    "837": "HC",
    "846": "IB",
    "850": "PO",
    "852": "PD",
    "855": "PR",
    "856": "SH",
    "857": "BS",
    "860": "PC",
    "861": "RC",
    "862": "SS",
    "864": "TX",
    "865": "CA",
    "869": "RS",
    "870": "RS",
    "875": "OG",
    "880": "GP",
    "940": "OW",
    "943": "AR",
    "944": "RE",
    "945": "SW",
    "947": "AW",
    "990": "GF",
    "997": "FA",
    "999": "FA",
}


def domain_lookup_functional_identifier_code(transaction_set_type: str) -> str:
    """Return the GS01 functional identifier code of a transaction set type.

    Args:
        transaction_set_type: X12 transaction set code (for example `850`).

    Returns:
        str: Functional identifier code (for example `PO`).

    Raises:
        FunctionalIdentifierCodeError: Raised for unknown transaction set types.
    """

    functional_identifier_code = FUNCTIONAL_IDENTIFIER_CODES.get(transaction_set_type.strip())
    if functional_identifier_code is None:
        raise FunctionalIdentifierCodeError(
            f"no functional identifier code known for transaction set '{transaction_set_type}'"
        )
    return functional_identifier_code


@dataclass(frozen=True)
class InterchangeHeader:
    """ISA segment values; time carries minute granularity."""

    sender_qualifier: str
    sender_id: str
    receiver_qualifier: str
    receiver_id: str
    date: str
    time: str
    control_number: int
    usage_indicator_code: str


@dataclass(frozen=True)
class GroupHeader:
    """GS segment values; time carries second granularity."""

    functional_identifier_code: str
    application_sender_code: str
    application_receiver_code: str
    date: str
    time: str
    control_number: int


@dataclass(frozen=True)
class Envelope:
    """Envelope shared by every destination of one outbound event."""

    interchange_header: InterchangeHeader
    group_header: GroupHeader

    def envelope_to_payload(self) -> dict[str, dict[str, object]]:
        """Render the envelope in the translator's camelCase wire shape.

        Returns:
            dict[str, dict[str, object]]: `interchangeHeader` and `groupHeader` objects.
        """

        interchange_header = self.interchange_header
        group_header = self.group_header
        return {
            "interchangeHeader": {
                "senderQualifier": interchange_header.sender_qualifier,
                "senderId": interchange_header.sender_id,
                "receiverQualifier": interchange_header.receiver_qualifier,
                "receiverId": interchange_header.receiver_id,
                "date": interchange_header.date,
                "time": interchange_header.time,
                "controlNumber": interchange_header.control_number,
                "usageIndicatorCode": interchange_header.usage_indicator_code,
            },
            "groupHeader": {
                "functionalIdentifierCode": group_header.functional_identifier_code,
                "applicationSenderCode": group_header.application_sender_code,
                "applicationReceiverCode": group_header.application_receiver_code,
                "date": group_header.date,
                "time": group_header.time,
                "controlNumber": group_header.control_number,
            },
        }


def domain_build_envelope(
    sender_profile: PartnerProfile,
    receiver_profile: PartnerProfile,
    functional_identifier_code: str,
    isa_control_number: int,
    gs_control_number: int,
    usage_indicator_code: str,
    document_date: datetime,
) -> Envelope:
    """Build the envelope for one outbound event.

    Args:
        sender_profile: Sender partner profile.
        receiver_profile: Receiver partner profile.
        functional_identifier_code: GS01 code of the transaction set type.
        isa_control_number: Issued interchange control number.
        gs_control_number: Issued functional group control number.
        usage_indicator_code: ISA15 usage indicator (`T` test, `P` production).
        document_date: Timestamp stamped on both headers.

    Returns:
        Envelope: Immutable envelope value.
    """

    document_day = document_date.strftime("%Y-%m-%d")
    return Envelope(
        interchange_header=InterchangeHeader(
            sender_qualifier=sender_profile.partner_interchange_qualifier,
            sender_id=sender_profile.partner_interchange_id,
            receiver_qualifier=receiver_profile.partner_interchange_qualifier,
            receiver_id=receiver_profile.partner_interchange_id,
            date=document_day,
            time=document_date.strftime("%H:%M"),
            control_number=isa_control_number,
            usage_indicator_code=usage_indicator_code,
        ),
        group_header=GroupHeader(
            functional_identifier_code=functional_identifier_code,
            application_sender_code=sender_profile.partner_application_id,
            application_receiver_code=receiver_profile.partner_application_id,
            date=document_day,
            time=document_date.strftime("%H:%M:%S"),
            control_number=gs_control_number,
        ),
    )
