"""Partner profile and partnership routing contracts."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import TransactionSetConfigError


class PartnerProfile(BaseModel):
    """Interchange identity attributes of one trading partner.

    Attributes:
        partner_interchange_qualifier: ISA05/ISA07 qualifier (for example `ZZ`).
        partner_interchange_id: ISA06/ISA08 identifier.
        partner_application_id: GS02/GS03 application code.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    partner_interchange_qualifier: str = Field(alias="partnerInterchangeQualifier", min_length=1)
    partner_interchange_id: str = Field(alias="partnerInterchangeId", min_length=1)
    partner_application_id: str = Field(alias="partnerApplicationId", min_length=1)


class BucketDestination(BaseModel):
    """Object storage destination; the object key is derived per event."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["bucket"]
    bucket_name: str = Field(alias="bucketName", min_length=1)
    path: str


class WebhookDestination(BaseModel):
    """HTTP destination receiving the translated document."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["webhook"]
    url: str = Field(min_length=1)


Destination = Annotated[Union[BucketDestination, WebhookDestination], Field(discriminator="type")]


class TransactionSetDestination(BaseModel):
    """One delivery target of a transaction set config.

    Attributes:
        destination: Tagged delivery target.
        mapping_id: Optional mapping applied to the event payload before translation.
    """

    model_config = ConfigDict(populate_by_name=True)

    destination: Destination
    mapping_id: str | None = Field(default=None, alias="mappingId")


class TransactionSetConfig(BaseModel):
    """Routing rule for one transaction set guide between two partners."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    description: str | None = None
    guide_id: str = Field(alias="guideId", min_length=1)
    usage_indicator_code: str = Field(alias="usageIndicatorCode", min_length=1, max_length=1)
    sending_partner_id: str = Field(alias="sendingPartnerId", min_length=1)
    receiving_partner_id: str = Field(alias="receivingPartnerId", min_length=1)
    destinations: list[TransactionSetDestination] = Field(default_factory=list)


class Partnership(BaseModel):
    """Partnership record shared by both partners of a pair."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transaction_sets: list[TransactionSetConfig] = Field(alias="transactionSets", default_factory=list)


def domain_transaction_set_configs_for_pair(
    partnership: Partnership,
    sending_partner_id: str,
    receiving_partner_id: str,
) -> list[TransactionSetConfig]:
    """Return configs routing documents from `sending_partner_id` to `receiving_partner_id`.

    Args:
        partnership: Resolved partnership record.
        sending_partner_id: Sender partner id.
        receiving_partner_id: Receiver partner id.

    Returns:
        list[TransactionSetConfig]: Configs in partnership order.
    """

    return [
        config
        for config in partnership.transaction_sets
        if config.sending_partner_id == sending_partner_id and config.receiving_partner_id == receiving_partner_id
    ]


def domain_select_transaction_set_config(
    transaction_set_configs: list[TransactionSetConfig],
    guide_id: str,
) -> TransactionSetConfig:
    """Select the single config that uses the resolved guide.

    Args:
        transaction_set_configs: Candidate configs for the partner pair.
        guide_id: Resolved guide id.

    Returns:
        TransactionSetConfig: Matching config.

    Raises:
        TransactionSetConfigError: Raised when zero or several configs match.
    """

    matching_configs = [config for config in transaction_set_configs if config.guide_id == guide_id]
    if not matching_configs:
        raise TransactionSetConfigError(f"no transaction set config found for guide '{guide_id}'")
    if len(matching_configs) > 1:
        raise TransactionSetConfigError(
            f"multiple transaction set configs found for guide '{guide_id}': {len(matching_configs)}"
        )
    return matching_configs[0]
