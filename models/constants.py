"""Schedule constants and enums."""

from enum import Enum
from typing import Dict, List, Tuple

# Spreadsheet column order (columns A..G of the source sheet)
SITE_COLUMNS: List[str] = [
    "company",
    "site_name",
    "address",
    "sector",
    "city",
    "state",
    "postal_code",
]

# Wire keys used when the site list is serialized into the prompt
SITE_WIRE_KEYS: Dict[str, str] = {
    "company": "razaoSocial",
    "site_name": "nomeObra",
    "address": "endereco",
    "sector": "setor",
    "city": "cidade",
    "state": "estado",
    "postal_code": "cep",
}

# Weekday slots: (attribute name, wire key)
WEEKDAYS: List[Tuple[str, str]] = [
    ("monday", "Segunda"),
    ("tuesday", "Terça"),
    ("wednesday", "Quarta"),
    ("thursday", "Quinta"),
    ("friday", "Sexta"),
]

WEEKS_PER_MONTH = 4


class Efficiency(Enum):
    """Efficiency classification of the current commute."""

    HIGH = "Alta"
    MEDIUM = "Média"
    LOW = "Baixa"

    @classmethod
    def parse(cls, value: str) -> "Efficiency":
        """Look up an efficiency label, tolerating case and a missing accent."""
        key = value.strip().lower()
        if key in _EFFICIENCY_ALIASES:
            return _EFFICIENCY_ALIASES[key]
        raise ValueError(f"Unknown efficiency value: {value!r}")


_EFFICIENCY_ALIASES: Dict[str, Efficiency] = {
    "alta": Efficiency.HIGH,
    "média": Efficiency.MEDIUM,
    "media": Efficiency.MEDIUM,
    "baixa": Efficiency.LOW,
    "high": Efficiency.HIGH,
    "medium": Efficiency.MEDIUM,
    "low": Efficiency.LOW,
}


class AgendaValidationMode(Enum):
    """How the monthly agenda coverage check is applied after decoding."""

    OFF = "off"
    WARN = "warn"
    STRICT = "strict"
