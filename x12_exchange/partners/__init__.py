"""Partner directory package resolving profiles and partnerships."""

from .interfaces import PartnerDirectoryPort
from .seed import partners_build_sample_partnership, partners_seed_sample_records
from .service import KeyValuePartnerDirectory, partners_partnership_key, partners_profile_key

__all__ = [
	"KeyValuePartnerDirectory",
	"PartnerDirectoryPort",
	"partners_build_sample_partnership",
	"partners_partnership_key",
	"partners_profile_key",
	"partners_seed_sample_records",
]
