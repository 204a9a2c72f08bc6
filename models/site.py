"""Construction site record parsed from one spreadsheet row."""

from dataclasses import astuple, dataclass
from typing import Dict

from .constants import SITE_WIRE_KEYS


@dataclass(frozen=True)
class SiteRecord:
    """A construction site to visit, in spreadsheet column order."""

    company: str = ""
    site_name: str = ""
    address: str = ""
    sector: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to the keyed mapping embedded in the analysis prompt."""
        return {
            wire_key: getattr(self, field_name)
            for field_name, wire_key in SITE_WIRE_KEYS.items()
        }

    def to_row(self) -> str:
        """Serialize back to a tab-separated spreadsheet row."""
        return "\t".join(astuple(self))

    @property
    def location(self) -> str:
        """Short human-readable location: city/state."""
        parts = [part for part in (self.city, self.state) if part]
        return "/".join(parts)
