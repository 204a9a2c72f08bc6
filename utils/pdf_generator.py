"""
PDF generator for the monthly route report.
Creates a paginated document from an analysis result: summary, weekly pattern,
monthly agenda and housing strategy.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from models.analysis import AnalysisResult, Visit
from models.constants import Efficiency
from models.errors import ExportFailure
from models.site import SiteRecord
from utils.markdown_generator import format_visit
from utils.translations import EFFICIENCY_LABELS, HEADERS, LABELS, PHRASES

logger = logging.getLogger(__name__)

DEFAULT_FONT_PATH = "/usr/share/fonts/noto/NotoSans-Regular.ttf"
DEFAULT_BOLD_FONT_PATH = "/usr/share/fonts/noto/NotoSans-Bold.ttf"

# Core-font fallbacks for characters outside latin-1
_LATIN1_REPLACEMENTS: Dict[str, str] = {
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "•": "-",
    "…": "...",
    "→": "->",
}


class _ReportPDF(FPDF):
    """FPDF document with a page-number footer."""

    footer_font = "Helvetica"

    def footer(self):
        self.set_y(-12)
        self.set_font(self.footer_font, "", 8)
        self.set_text_color(*PDFGenerator.GRAY)
        self.cell(0, 5, f"{LABELS['page']} {self.page_no()} / {{nb}}", align="C")
        self.set_text_color(0, 0, 0)


class PDFGenerator:
    """
    Generates the PDF version of the route report.

    Pages:
    - Summary: diagnosis, efficiency badge, current evaluation, savings
    - Weekly route pattern (one block per weekday)
    - Monthly agenda (one five-column table per week)
    - Housing strategy, clusters and conclusion
    """

    # Color scheme
    INDIGO = (79, 70, 229)
    SLATE = (30, 41, 59)
    GRAY = (100, 116, 139)
    LIGHT_GRAY = (241, 245, 249)
    WHITE = (255, 255, 255)

    EFFICIENCY_COLORS = {
        Efficiency.HIGH: (4, 120, 87),
        Efficiency.MEDIUM: (180, 83, 9),
        Efficiency.LOW: (190, 18, 60),
    }

    PAGE_WIDTH = 190  # A4 minus 10 mm margins

    def __init__(
        self,
        output_dir: str,
        run_timestamp: datetime,
        config: Optional[Dict] = None,
    ):
        """
        Initialize PDF generator.

        Args:
            output_dir: Directory for PDF output
            run_timestamp: Timestamp of the analysis run
            config: The ``output`` section of the configuration
        """
        self.output_dir = Path(output_dir)
        self.run_timestamp = run_timestamp
        self.config = config or {}

        self.pdf = _ReportPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(auto=True, margin=15)
        self.pdf.set_margins(10, 10, 10)

        self._setup_fonts_and_metadata()

    def _setup_fonts_and_metadata(self):
        """Register a Unicode font when available, otherwise use Helvetica."""
        regular = Path(self.config.get("font_path", DEFAULT_FONT_PATH))
        bold = Path(self.config.get("font_bold_path", DEFAULT_BOLD_FONT_PATH))

        if regular.is_file() and bold.is_file():
            self.pdf.add_font("NotoSans", "", str(regular))
            self.pdf.add_font("NotoSans", "B", str(bold))
            self.font = "NotoSans"
            self.unicode_font = True
        else:
            logger.debug(f"Font {regular} not found, using Helvetica")
            self.font = "Helvetica"
            self.unicode_font = False
        self.pdf.footer_font = self.font

        self.pdf.set_title(HEADERS["report_title"])
        self.pdf.set_author("SP Route Optimizer")
        self.pdf.set_creator("sp-route-optimizer")
        self.pdf.set_subject(HEADERS["report_subtitle"])

    def _text(self, text: str) -> str:
        """Make text printable with the active font."""
        if self.unicode_font:
            return text
        for char, replacement in _LATIN1_REPLACEMENTS.items():
            text = text.replace(char, replacement)
        return text.encode("latin-1", "replace").decode("latin-1")

    def _fit(self, text: str, width: float) -> str:
        """Truncate text so it fits in a cell of the given width."""
        text = self._text(text)
        if self.pdf.get_string_width(text) <= width - 2:
            return text
        while text and self.pdf.get_string_width(text + "...") > width - 2:
            text = text[:-1]
        return text + "..."

    def generate_pdf_report(
        self,
        result: AnalysisResult,
        address: str,
        sites: List[SiteRecord],
        filename: str = "roteiro_mensal.pdf",
    ) -> str:
        """
        Generate the complete PDF report.

        Args:
            result: Decoded analysis result
            address: Home address used for the analysis
            sites: Sites sent with the request
            filename: Output filename

        Returns:
            Path to generated PDF file

        Raises:
            ExportFailure: If rendering or writing the document fails
        """
        output_path = self.output_dir / filename
        try:
            self._add_summary_page(result, address, sites)
            self._add_weekly_route_page(result)
            self._add_monthly_agenda_page(result)
            self._add_housing_page(result)

            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.pdf.output(str(output_path))
        except ExportFailure:
            raise
        except Exception as e:
            raise ExportFailure(f"Failed to render PDF report: {e}") from e

        return str(output_path)

    def _section_title(self, title: str, size: int = 16):
        self.pdf.set_font(self.font, "B", size)
        self.pdf.set_text_color(*self.SLATE)
        self.pdf.cell(0, 10, self._text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.pdf.set_text_color(0, 0, 0)

    def _paragraph(self, text: str, size: int = 10, color: Tuple[int, int, int] = (0, 0, 0)):
        self.pdf.set_font(self.font, "", size)
        self.pdf.set_text_color(*color)
        self.pdf.multi_cell(
            self.PAGE_WIDTH, 5, self._text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )
        self.pdf.set_text_color(0, 0, 0)

    def _key_value(self, label: str, value: str):
        self.pdf.set_font(self.font, "B", 10)
        self.pdf.cell(50, 6, self._text(f"{label}:"))
        self.pdf.set_font(self.font, "", 10)
        self.pdf.multi_cell(
            self.PAGE_WIDTH - 50, 6, self._text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )

    def _add_summary_page(self, result: AnalysisResult, address: str, sites: List[SiteRecord]):
        """First page: header, diagnosis and current evaluation."""
        self.pdf.add_page()

        self.pdf.set_font(self.font, "B", 24)
        self.pdf.set_text_color(*self.INDIGO)
        self.pdf.cell(
            0, 14, self._text(HEADERS["report_title"]), align="C",
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.pdf.set_font(self.font, "", 10)
        self.pdf.set_text_color(*self.GRAY)
        timestamp_str = self.run_timestamp.strftime("%d/%m/%Y %H:%M")
        self.pdf.cell(
            0, 6, self._text(f"{HEADERS['report_subtitle']} - {LABELS['generated']} {timestamp_str}"),
            align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.pdf.set_text_color(0, 0, 0)
        self.pdf.ln(4)

        self._key_value(LABELS["home_address"], address)
        self._key_value(LABELS["site_count"], str(len(sites)))
        self.pdf.ln(4)

        # Diagnosis box
        self._section_title(HEADERS["diagnosis"])
        self.pdf.set_fill_color(*self.LIGHT_GRAY)
        self.pdf.set_font(self.font, "", 11)
        self.pdf.multi_cell(
            self.PAGE_WIDTH, 6, self._text(f'"{result.diagnosis}"'), fill=True,
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.pdf.ln(4)

        # Efficiency badge
        evaluation = result.current_evaluation
        self._section_title(HEADERS["current_evaluation"])
        badge = EFFICIENCY_LABELS.get(evaluation.efficiency.value, evaluation.efficiency.value)
        self.pdf.set_font(self.font, "B", 11)
        self.pdf.set_text_color(*self.EFFICIENCY_COLORS[evaluation.efficiency])
        self.pdf.cell(0, 8, self._text(badge), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.pdf.set_text_color(0, 0, 0)

        self._key_value(LABELS["distance_avg"], evaluation.distance_avg)
        self._key_value(LABELS["time_avg"], evaluation.time_avg)
        if evaluation.critical_regions:
            self._key_value(LABELS["critical_regions"], ", ".join(evaluation.critical_regions))
        self.pdf.ln(2)
        self._paragraph(evaluation.efficiency_description, color=self.GRAY)
        self.pdf.ln(4)

        # Savings highlight
        savings = result.housing_recommendation.comparison.monthly_savings
        self.pdf.set_fill_color(*self.INDIGO)
        self.pdf.set_text_color(*self.WHITE)
        self.pdf.set_font(self.font, "B", 12)
        self.pdf.cell(
            0, 12, self._text(f"{LABELS['monthly_savings']}: {savings}"), align="C", fill=True,
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.pdf.set_text_color(0, 0, 0)

    def _add_weekly_route_page(self, result: AnalysisResult):
        """Typical week: one block per weekday with visits and times."""
        self.pdf.add_page()
        self._section_title(HEADERS["weekly_route"])

        for day in result.weekly_route:
            self.pdf.set_fill_color(*self.SLATE)
            self.pdf.set_text_color(*self.WHITE)
            self.pdf.set_font(self.font, "B", 10)
            self.pdf.cell(
                self.PAGE_WIDTH, 7, self._fit(f"{day.day.upper()}  |  {day.estimated_travel_time}", self.PAGE_WIDTH),
                fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT,
            )
            self.pdf.set_text_color(0, 0, 0)

            self.pdf.set_font(self.font, "", 9)
            if day.visits:
                for idx, visit in enumerate(day.visits, 1):
                    self.pdf.set_x(15)
                    self.pdf.multi_cell(
                        self.PAGE_WIDTH - 5, 5, self._text(f"{idx}. {format_visit(visit)}"),
                        new_x=XPos.LMARGIN, new_y=YPos.NEXT,
                    )
            else:
                self.pdf.set_text_color(*self.GRAY)
                self.pdf.cell(0, 5, self._text(PHRASES["available"]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
                self.pdf.set_text_color(0, 0, 0)

            self.pdf.set_font(self.font, "B", 8)
            self.pdf.cell(
                self.PAGE_WIDTH, 5, self._text(f"{LABELS['total_time']}: {day.total_time}"),
                align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT,
            )
            self.pdf.ln(3)

    def _add_monthly_agenda_page(self, result: AnalysisResult):
        """Monthly agenda: a five-column table per week."""
        self.pdf.add_page()
        self._section_title(HEADERS["monthly_agenda"])
        self._paragraph(PHRASES["agenda_subtitle"], size=9, color=self.GRAY)
        self.pdf.ln(3)

        col_width = self.PAGE_WIDTH / 5
        for week in result.monthly_agenda:
            days: List[Tuple[str, Tuple[Visit, ...]]] = list(week.schedule.days())
            rows = max([len(visits) for _, visits in days] + [1])

            # Keep a week's table on one page
            if self.pdf.get_y() + 16 + rows * 6 > 280:
                self.pdf.add_page()

            self.pdf.set_font(self.font, "B", 10)
            self.pdf.set_text_color(*self.SLATE)
            self.pdf.cell(0, 8, self._text(f"{LABELS['week']} {week.week}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

            self.pdf.set_font(self.font, "B", 8)
            self.pdf.set_fill_color(*self.SLATE)
            self.pdf.set_text_color(*self.WHITE)
            for label, _ in days:
                self.pdf.cell(col_width, 7, self._text(label), border=1, align="C", fill=True)
            self.pdf.ln()

            self.pdf.set_font(self.font, "", 7)
            self.pdf.set_text_color(0, 0, 0)
            for row in range(rows):
                fill = row % 2 == 1
                self.pdf.set_fill_color(*self.LIGHT_GRAY)
                for _, visits in days:
                    if row < len(visits):
                        text = self._fit(format_visit(visits[row]), col_width)
                    elif row == 0:
                        text = self._text(PHRASES["available"])
                    else:
                        text = ""
                    self.pdf.cell(col_width, 6, text, border=1, fill=fill)
                self.pdf.ln()
            self.pdf.ln(4)

    def _add_housing_page(self, result: AnalysisResult):
        """Housing strategy, clusters and conclusion."""
        housing = result.housing_recommendation
        self.pdf.add_page()
        self._section_title(HEADERS["housing"])

        self.pdf.set_font(self.font, "B", 11)
        self.pdf.set_text_color(*self.INDIGO)
        self.pdf.multi_cell(
            self.PAGE_WIDTH, 7, self._text("  |  ".join(housing.top_neighborhoods)),
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        self.pdf.set_text_color(0, 0, 0)
        self.pdf.ln(2)
        self._paragraph(housing.centroid_description)
        self.pdf.ln(3)

        comparison = housing.comparison
        col_width = self.PAGE_WIDTH / 3
        self.pdf.set_font(self.font, "B", 9)
        self.pdf.set_fill_color(*self.LIGHT_GRAY)
        for label in (LABELS["current_avg_time"], LABELS["suggested_avg_time"], LABELS["monthly_savings"]):
            self.pdf.cell(col_width, 7, self._text(label), border=1, align="C", fill=True)
        self.pdf.ln()
        self.pdf.set_font(self.font, "", 10)
        for value in (comparison.current_avg_time, comparison.suggested_avg_time, comparison.monthly_savings):
            self.pdf.cell(col_width, 8, self._fit(value, col_width), border=1, align="C")
        self.pdf.ln(12)

        if result.clusters:
            self._section_title(HEADERS["clusters"], size=13)
            for cluster in result.clusters:
                self.pdf.set_font(self.font, "B", 9)
                self.pdf.cell(
                    0, 6, self._text(f"{cluster.name} ({cluster.region})"),
                    new_x=XPos.LMARGIN, new_y=YPos.NEXT,
                )
                self.pdf.set_x(15)
                self.pdf.set_font(self.font, "", 8)
                self.pdf.multi_cell(
                    self.PAGE_WIDTH - 5, 4, self._text(", ".join(cluster.sites)),
                    new_x=XPos.LMARGIN, new_y=YPos.NEXT,
                )
            self.pdf.ln(4)

        self._section_title(HEADERS["conclusion"], size=13)
        self._paragraph(result.time_savings_summary)
