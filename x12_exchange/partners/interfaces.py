"""Typed interfaces for partner directory lookups."""

from typing import Protocol

from x12_exchange.domain import PartnerProfile, Partnership


class PartnerDirectoryPort(Protocol):
    """Port definition for partner profile and partnership resolution."""

    def partners_load_profile(self, partner_id: str) -> PartnerProfile:
        """Load one partner profile.

        Args:
            partner_id: Partner identifier.

        Returns:
            PartnerProfile: Stored profile.

        Raises:
            PartnerProfileNotFoundError: Raised when no valid profile is stored.
        """

    def partners_load_partnership(self, sending_partner_id: str, receiving_partner_id: str) -> Partnership:
        """Load the partnership shared by two partners, regardless of key order.

        Args:
            sending_partner_id: Sender partner id.
            receiving_partner_id: Receiver partner id.

        Returns:
            Partnership: Stored partnership.

        Raises:
            PartnershipNotFoundError: Raised when neither key order resolves.
        """
