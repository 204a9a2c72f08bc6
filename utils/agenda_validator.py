"""Post-decode check that the monthly agenda covers every site exactly once."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from models.analysis import AnalysisResult
from models.site import SiteRecord

logger = logging.getLogger(__name__)


def normalize_site_name(name: str) -> str:
    """Case- and whitespace-insensitive key for matching site names."""
    return " ".join(name.split()).casefold()


@dataclass
class CoverageReport:
    """Differences between the input site list and the monthly agenda."""

    missing: List[str] = field(default_factory=list)
    duplicated: Dict[str, int] = field(default_factory=dict)
    unknown: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not (self.missing or self.duplicated or self.unknown)

    def describe(self) -> str:
        """One-line summary for logs."""
        if self.is_complete:
            return "every site scheduled exactly once"
        parts = []
        if self.missing:
            parts.append(f"missing: {', '.join(self.missing)}")
        if self.duplicated:
            parts.append(
                "duplicated: "
                + ", ".join(f"{name} (x{count})" for name, count in self.duplicated.items())
            )
        if self.unknown:
            parts.append(f"unknown: {', '.join(self.unknown)}")
        return "; ".join(parts)


def check_agenda_coverage(
    sites: List[SiteRecord], result: AnalysisResult
) -> CoverageReport:
    """
    Compare the scheduled visits with the requested sites.

    Args:
        sites: Sites sent with the analysis request
        result: Decoded analysis result

    Returns:
        CoverageReport listing missing, duplicated and unknown site names
    """
    expected = Counter()
    expected_labels: Dict[str, str] = {}
    for site in sites:
        key = normalize_site_name(site.site_name)
        expected[key] += 1
        expected_labels.setdefault(key, site.site_name.strip())

    scheduled = Counter()
    labels: Dict[str, str] = {}
    for name in result.scheduled_site_names():
        key = normalize_site_name(name)
        scheduled[key] += 1
        labels.setdefault(key, name.strip())

    # Rows sharing a site name are separate sites, each due once
    report = CoverageReport()
    for key, label in expected_labels.items():
        count = scheduled.get(key, 0)
        if count < expected[key]:
            report.missing.extend([label] * (expected[key] - count))
        elif count > expected[key]:
            report.duplicated[label] = count

    for key, label in labels.items():
        if key not in expected:
            report.unknown.append(label)

    logger.debug(f"Agenda coverage: {report.describe()}")
    return report
