"""Markdown report generation for analysis results."""

import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import yaml

from models.analysis import AnalysisResult, Visit, VisitDetail
from models.errors import ExportFailure
from models.site import SiteRecord
from utils.translations import EFFICIENCY_LABELS, HEADERS, LABELS, PHRASES


def format_visit(visit: Visit) -> str:
    """Render a visit as a single line of text."""
    if not isinstance(visit, VisitDetail):
        return visit

    details = []
    if visit.metro_line:
        details.append(visit.metro_line)
    if visit.bus_connection:
        details.append(visit.bus_connection)
    if visit.walking_minutes is not None:
        details.append(f"{visit.walking_minutes} {PHRASES['walking']}")
    if visit.full_shift:
        details.append(PHRASES["full_shift"])

    if details:
        return f"{visit.site_name} ({'; '.join(details)})"
    return visit.site_name


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownGenerator:
    """Generator for the analysis report with YAML frontmatter."""

    def __init__(self, output_dir: str = "output"):
        """
        Initialize the generator.

        Args:
            output_dir: Directory the report file is written to
        """
        self.output_dir = output_dir

    def generate_yaml_frontmatter(
        self,
        result: AnalysisResult,
        address: str,
        sites: List[SiteRecord],
        run_timestamp: datetime,
    ) -> str:
        """Generate YAML frontmatter for the report."""
        housing = result.housing_recommendation
        frontmatter: Dict[str, Any] = {
            "generated_at": run_timestamp.isoformat(),
            "home_address": address,
            "site_count": len(sites),
            "efficiency": result.current_evaluation.efficiency.value,
            "time_avg": result.current_evaluation.time_avg,
            "distance_avg": result.current_evaluation.distance_avg,
            "housing": {
                "top_neighborhoods": list(housing.top_neighborhoods),
                "current_avg_time": housing.comparison.current_avg_time,
                "suggested_avg_time": housing.comparison.suggested_avg_time,
                "monthly_savings": housing.comparison.monthly_savings,
            },
            "clusters": [cluster.name for cluster in result.clusters],
        }

        return yaml.dump(
            frontmatter, allow_unicode=True, sort_keys=False, default_flow_style=False
        )

    def generate_markdown_content(
        self, result: AnalysisResult, address: str, sites: List[SiteRecord]
    ) -> str:
        """Generate the markdown body content."""
        evaluation = result.current_evaluation
        housing = result.housing_recommendation
        content = [
            f"# {HEADERS['report_title']}\n",
            f"*{HEADERS['report_subtitle']}*\n",
            f"**{LABELS['home_address']}:** {address}  ",
            f"**{LABELS['site_count']}:** {len(sites)}\n",
        ]

        # Diagnosis
        content.append(f"## {HEADERS['diagnosis']}\n")
        content.append(f"> {result.diagnosis}\n")

        # Current evaluation
        content.append(f"## {HEADERS['current_evaluation']}\n")
        badge = EFFICIENCY_LABELS.get(evaluation.efficiency.value, evaluation.efficiency.value)
        content.append(f"**{LABELS['efficiency']}:** {badge}\n")
        content.append(f"- **{LABELS['distance_avg']}:** {evaluation.distance_avg}")
        content.append(f"- **{LABELS['time_avg']}:** {evaluation.time_avg}")
        if evaluation.critical_regions:
            content.append(
                f"- **{LABELS['critical_regions']}:** {', '.join(evaluation.critical_regions)}"
            )
        content.append(f"\n{evaluation.efficiency_description}\n")

        # Weekly route pattern
        content.append(f"## {HEADERS['weekly_route']}\n")
        for day in result.weekly_route:
            content.append(f"### {day.day}\n")
            content.append(f"*{LABELS['travel_time']}: {day.estimated_travel_time}*\n")
            if day.visits:
                for idx, visit in enumerate(day.visits, 1):
                    content.append(f"{idx}. {format_visit(visit)}")
            else:
                content.append(f"_{PHRASES['available']}_")
            content.append(f"\n**{LABELS['total_time']}:** {day.total_time}\n")

        # Monthly agenda
        content.append(f"## {HEADERS['monthly_agenda']}\n")
        content.append(f"*{PHRASES['agenda_subtitle']}*\n")
        for week in result.monthly_agenda:
            days: List[Tuple[str, Tuple[Visit, ...]]] = list(week.schedule.days())
            content.append(f"### {LABELS['week']} {week.week}\n")
            content.append("| " + " | ".join(label for label, _ in days) + " |")
            content.append("|" + "---|" * len(days))
            content.append(
                "| "
                + " | ".join(
                    "<br>".join(_escape_cell(format_visit(v)) for v in visits)
                    if visits
                    else PHRASES["available"]
                    for _, visits in days
                )
                + " |"
            )
            content.append("")

        # Clusters
        if result.clusters:
            content.append(f"## {HEADERS['clusters']}\n")
            for cluster in result.clusters:
                content.append(
                    f"- **{cluster.name}** ({LABELS['region']}: {cluster.region}): "
                    f"{', '.join(cluster.sites)}"
                )
            content.append("")

        # Housing strategy
        content.append(f"## {HEADERS['housing']}\n")
        for neighborhood in housing.top_neighborhoods:
            content.append(f"- {neighborhood}")
        content.append(f"\n{housing.centroid_description}\n")
        content.append(f"| {LABELS['current_avg_time']} | {LABELS['suggested_avg_time']} | {LABELS['monthly_savings']} |")
        content.append("|---|---|---|")
        content.append(
            f"| {housing.comparison.current_avg_time} | {housing.comparison.suggested_avg_time} "
            f"| {housing.comparison.monthly_savings} |\n"
        )

        # Conclusion
        content.append(f"## {HEADERS['conclusion']}\n")
        content.append(f"{result.time_savings_summary}\n")

        # Input sites
        content.append(f"## {HEADERS['sites']}\n")
        columns = ["site_name", "company", "address", "sector", "city", "state", "postal_code"]
        content.append("| " + " | ".join(LABELS[c] for c in columns) + " |")
        content.append("|" + "---|" * len(columns))
        for site in sites:
            content.append(
                "| "
                + " | ".join(_escape_cell(getattr(site, c)) or "-" for c in columns)
                + " |"
            )

        content.extend(["", "---", "", f"*{PHRASES['generated_with']}*"])
        return "\n".join(content)

    def generate_report_file(
        self,
        result: AnalysisResult,
        address: str,
        sites: List[SiteRecord],
        run_timestamp: Optional[datetime] = None,
        filename: str = "roteiro_mensal.md",
    ) -> str:
        """
        Generate the complete markdown report.

        Args:
            result: Decoded analysis result
            address: Home address used for the analysis
            sites: Sites sent with the request
            run_timestamp: Timestamp of the run (defaults to now)
            filename: Output filename

        Returns:
            Path to the generated file

        Raises:
            ExportFailure: If the report cannot be rendered or written
        """
        run_timestamp = run_timestamp or datetime.now()
        try:
            frontmatter = self.generate_yaml_frontmatter(result, address, sites, run_timestamp)
            body = self.generate_markdown_content(result, address, sites)
        except Exception as e:
            raise ExportFailure(f"Failed to render markdown report: {e}") from e
        full_content = f"---\n{frontmatter}---\n\n{body}\n"

        filepath = os.path.join(self.output_dir, filename)
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(full_content)
        except OSError as e:
            raise ExportFailure(f"Cannot write markdown report {filepath}: {e}") from e

        return filepath
