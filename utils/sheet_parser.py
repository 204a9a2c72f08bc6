"""Parser for site rows pasted from a spreadsheet."""

import logging
import re
from typing import List

from models.constants import SITE_COLUMNS
from models.errors import InputValidationError
from models.site import SiteRecord
from utils.translations import MESSAGES

logger = logging.getLogger(__name__)

LINE_SPLIT = re.compile(r"\r\n|\r|\n")


def parse_sites(raw_text: str) -> List[SiteRecord]:
    """
    Convert pasted tab-separated rows into site records.

    Columns are mapped positionally (company, site name, address, sector,
    city, state, postal code). Missing trailing columns become empty strings
    and extra columns are ignored. Rows without a site name are dropped.

    Args:
        raw_text: Text copied from columns A..G of the spreadsheet

    Returns:
        Site records in input order (possibly empty)
    """
    if not raw_text:
        return []

    lines = LINE_SPLIT.split(raw_text)

    # Trim blank lines around the block; tabs inside rows are significant
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    sites: List[SiteRecord] = []
    skipped = 0
    for line in lines:
        columns = line.split("\t")
        values = columns[: len(SITE_COLUMNS)]
        values += [""] * (len(SITE_COLUMNS) - len(values))
        record = SiteRecord(*values)

        if not record.site_name.strip():
            skipped += 1
            continue
        sites.append(record)

    if skipped:
        logger.debug(f"Skipped {skipped} rows without a site name")
    logger.debug(f"Parsed {len(sites)} site rows")
    return sites


def validate_inputs(address: str, sites: List[SiteRecord]) -> None:
    """
    Check the form before an analysis request is made.

    Raises:
        InputValidationError: If the address is empty or no site row is usable
    """
    if not address or not address.strip():
        raise InputValidationError(MESSAGES["missing_address"])
    if not sites:
        raise InputValidationError(MESSAGES["missing_sites"])
