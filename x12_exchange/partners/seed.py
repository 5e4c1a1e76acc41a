"""Sample partner records for local setup.

Creates two partners, `this-is-me` and `another-merchant`, and one
partnership routing outbound 850 purchase orders to a bucket and inbound 855
acknowledgements to a webhook.
"""

from __future__ import annotations

import logging
from typing import Final

from x12_exchange.db import KeyValueStorePort
from x12_exchange.domain import PartnerProfile, Partnership

from .service import KeyValuePartnerDirectory

logger = logging.getLogger(__name__)

SAMPLE_LOCAL_PARTNER_ID: Final[str] = "this-is-me"
SAMPLE_REMOTE_PARTNER_ID: Final[str] = "another-merchant"

_SAMPLE_PROFILES: Final[dict[str, PartnerProfile]] = {
    SAMPLE_LOCAL_PARTNER_ID: PartnerProfile(
        partner_interchange_qualifier="ZZ",
        partner_interchange_id="THISISME",
        partner_application_id="THISISME",
    ),
    SAMPLE_REMOTE_PARTNER_ID: PartnerProfile(
        partner_interchange_qualifier="14",
        partner_interchange_id="ANOTHERMERCH",
        partner_application_id="ANOTHERMERCH",
    ),
}


def partners_build_sample_partnership(
    guide_850_id: str,
    guide_855_id: str,
    bucket_name: str,
    webhook_url: str,
) -> Partnership:
    """Build the sample partnership between the two sample partners."""

    return Partnership.model_validate(
        {
            "transactionSets": [
                {
                    "description": "Purchase Orders sent to ANOTHERMERCH",
                    "guideId": guide_850_id,
                    "usageIndicatorCode": "T",
                    "sendingPartnerId": SAMPLE_LOCAL_PARTNER_ID,
                    "receivingPartnerId": SAMPLE_REMOTE_PARTNER_ID,
                    "destinations": [
                        {
                            "destination": {
                                "type": "bucket",
                                "bucketName": bucket_name,
                                "path": "trading_partners/ANOTHERMERCH/outbound",
                            }
                        }
                    ],
                },
                {
                    "description": "Purchase Order Acknowledgements received from ANOTHERMERCH",
                    "guideId": guide_855_id,
                    "usageIndicatorCode": "T",
                    "sendingPartnerId": SAMPLE_REMOTE_PARTNER_ID,
                    "receivingPartnerId": SAMPLE_LOCAL_PARTNER_ID,
                    "destinations": [{"destination": {"type": "webhook", "url": webhook_url}}],
                },
            ]
        }
    )


def partners_seed_sample_records(
    key_value_store: KeyValueStorePort,
    keyspace: str,
    guide_850_id: str,
    guide_855_id: str,
    bucket_name: str,
    webhook_url: str,
) -> list[str]:
    """Write sample profiles, partnership and interchange lookups.

    Args:
        key_value_store: Target store.
        keyspace: Partner keyspace.
        guide_850_id: Guide id of the outbound 850.
        guide_855_id: Guide id of the inbound 855.
        bucket_name: Bucket receiving outbound 850 documents.
        webhook_url: Webhook receiving inbound 855 documents.

    Returns:
        list[str]: Keys written, in write order.
    """

    directory = KeyValuePartnerDirectory(key_value_store=key_value_store, keyspace=keyspace)
    written_keys: list[str] = []

    for partner_id, profile in _SAMPLE_PROFILES.items():
        directory.partners_save_profile(partner_id, profile)
        written_keys.append(f"profile|{partner_id}")

    directory.partners_save_partnership(
        SAMPLE_LOCAL_PARTNER_ID,
        SAMPLE_REMOTE_PARTNER_ID,
        partners_build_sample_partnership(
            guide_850_id=guide_850_id,
            guide_855_id=guide_855_id,
            bucket_name=bucket_name,
            webhook_url=webhook_url,
        ),
    )
    written_keys.append(f"partnership|{SAMPLE_LOCAL_PARTNER_ID}|{SAMPLE_REMOTE_PARTNER_ID}")

    for partner_id, profile in _SAMPLE_PROFILES.items():
        lookup_key = f"lookup|ISA|{profile.partner_interchange_qualifier}/{profile.partner_interchange_id}"
        key_value_store.db_key_value_set(keyspace, lookup_key, {"partnerId": partner_id})
        written_keys.append(lookup_key)

    logger.info("seeded %d sample partner records", len(written_keys))
    return written_keys
