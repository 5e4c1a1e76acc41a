"""Partner directory backed by the key-value store.

Records live in one keyspace under `profile|{partnerId}` and
`partnership|{firstPartnerId}|{secondPartnerId}`. A partnership is stored
once per pair, in either order, and serves documents flowing both ways.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from pydantic import ValidationError

from x12_exchange.db import KeyValueStorePort
from x12_exchange.domain import PartnerProfile, Partnership
from x12_exchange.domain.errors import PartnerProfileNotFoundError, PartnershipNotFoundError

from .interfaces import PartnerDirectoryPort

logger = logging.getLogger(__name__)

_PROFILE_KEY_PREFIX: Final[str] = "profile"
_PARTNERSHIP_KEY_PREFIX: Final[str] = "partnership"


def partners_profile_key(partner_id: str) -> str:
    """Return the key-value key of a partner profile."""

    return f"{_PROFILE_KEY_PREFIX}|{partner_id}"


def partners_partnership_key(first_partner_id: str, second_partner_id: str) -> str:
    """Return the key-value key of a partnership in the given partner order."""

    return f"{_PARTNERSHIP_KEY_PREFIX}|{first_partner_id}|{second_partner_id}"


class KeyValuePartnerDirectory(PartnerDirectoryPort):
    """Partner directory reading profiles and partnerships from one keyspace."""

    def __init__(self, key_value_store: KeyValueStorePort, keyspace: str):
        """Initialize partner directory.

        Args:
            key_value_store: Store holding partner records.
            keyspace: Keyspace of partner records.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if key_value_store is None:
            raise ValueError("key_value_store must not be None")
        if not keyspace.strip():
            raise ValueError("keyspace must not be blank")
        self._key_value_store = key_value_store
        self._keyspace = keyspace.strip()

    def partners_load_profile(self, partner_id: str) -> PartnerProfile:
        """Load and validate one partner profile.

        Raises:
            PartnerProfileNotFoundError: Raised when the profile is missing or malformed.
        """

        stored_value = self._key_value_store.db_key_value_get(self._keyspace, partners_profile_key(partner_id))
        if stored_value is None:
            raise PartnerProfileNotFoundError(f"partner profile not found: {partner_id}")
        try:
            return PartnerProfile.model_validate(stored_value)
        except ValidationError as error:
            raise PartnerProfileNotFoundError(f"partner profile for {partner_id} is invalid: {error}") from error

    def partners_load_partnership(self, sending_partner_id: str, receiving_partner_id: str) -> Partnership:
        """Load the partnership trying `sender|receiver` first, then `receiver|sender`.

        A store failure on one key order is logged and the other order is
        still tried.

        Raises:
            PartnershipNotFoundError: Raised when neither key order yields a valid record.
        """

        candidate_keys = [
            partners_partnership_key(sending_partner_id, receiving_partner_id),
            partners_partnership_key(receiving_partner_id, sending_partner_id),
        ]
        for candidate_key in dict.fromkeys(candidate_keys):
            try:
                stored_value = self._key_value_store.db_key_value_get(self._keyspace, candidate_key)
            except (RuntimeError, ValueError) as error:
                logger.warning("partnership lookup for key %s failed: %s", candidate_key, error)
                continue
            if stored_value is None:
                continue
            try:
                return Partnership.model_validate(stored_value)
            except ValidationError as error:
                logger.warning("partnership record %s is invalid: %s", candidate_key, error)
                continue

        raise PartnershipNotFoundError(
            f"partnership not found between {sending_partner_id} and {receiving_partner_id}"
        )

    def partners_save_profile(self, partner_id: str, profile: PartnerProfile) -> None:
        """Store one partner profile in its camelCase record shape."""

        self._key_value_store.db_key_value_set(
            self._keyspace,
            partners_profile_key(partner_id),
            profile.model_dump(by_alias=True, mode="json"),
        )

    def partners_save_partnership(
        self,
        first_partner_id: str,
        second_partner_id: str,
        partnership: Partnership | dict[str, Any],
    ) -> None:
        """Store one partnership record under `partnership|{first}|{second}`."""

        validated_partnership = Partnership.model_validate(partnership)
        self._key_value_store.db_key_value_set(
            self._keyspace,
            partners_partnership_key(first_partner_id, second_partner_id),
            validated_partnership.model_dump(by_alias=True, mode="json", exclude_none=True),
        )
