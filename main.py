"""Monthly site-visit route planner backed by a language model."""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from llm import get_requester
from llm.ollama import OllamaRequester
from models.analysis import AnalysisResult
from models.constants import AgendaValidationMode
from models.errors import ExportFailure
from session import AnalysisSession
from utils.markdown_generator import MarkdownGenerator
from utils.pdf_generator import PDFGenerator
from utils.translations import MESSAGES

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Suppress font subsetting logs from PDF generation
logging.getLogger('fontTools.subset').setLevel(logging.WARNING)
logging.getLogger('httpx').setLevel(logging.WARNING)


class RoutePlanner:
    """Runs one analysis from config.json input and writes the reports."""

    def __init__(self, config: Dict[str, Any], base_dir: Optional[Path] = None):
        """
        Initialize the planner with configuration.

        Args:
            config: Configuration dictionary from config.json
            base_dir: Directory relative paths in the config resolve against
        """
        self.config = config
        self.base_dir = base_dir or Path(__file__).parent

        self.home_address = config.get("home_address", "")
        self.sites_file = self.base_dir / config.get("sites_file", "obras.tsv")

        # Generate timestamped run folder
        self.run_timestamp = datetime.now()
        self.run_id = self.run_timestamp.strftime("%Y-%m-%d-%H%M%S")

        output_config = config.get("output", {})
        self.output_config = output_config
        output_folder = output_config.get("output_folder", "output")
        self.run_folder = self.base_dir / output_folder / f"roteiro_{self.run_id}"
        self.generate_markdown = output_config.get("generate_markdown", True)
        self.generate_pdf = output_config.get("generate_pdf", True)

        # Requester and session
        self.requester = get_requester(config)
        mode = config.get("agenda_validation", {}).get("mode", "warn")
        self.session = AnalysisSession(
            self.requester, agenda_validation=AgendaValidationMode(mode)
        )

    def read_sites_input(self) -> str:
        """Read the pasted spreadsheet rows from the sites file."""
        # utf-8-sig drops the BOM spreadsheet exports often carry
        with open(self.sites_file, "r", encoding="utf-8-sig") as f:
            return f.read()

    async def run(self) -> Optional[AnalysisResult]:
        """
        Run the analysis and write the reports.

        Returns:
            The decoded analysis result, or None if the analysis did not succeed
        """
        raw_input = self.read_sites_input()

        if isinstance(self.requester, OllamaRequester):
            if not await self.requester.check_availability():
                logger.warning("Ollama unavailable, the analysis request will likely fail")

        logger.info(f"Starting analysis for {self.home_address or '(no address)'}")
        await self.session.run_analysis(self.home_address, raw_input)

        if self.session.error:
            logger.error(self.session.error)
            return None

        result = self.session.result
        self.run_folder.mkdir(parents=True, exist_ok=True)
        self._save_result_json(result)

        if self.generate_markdown:
            self._generate_markdown_report(result)
        if self.generate_pdf:
            self._generate_pdf_report(result)

        return result

    def _save_result_json(self, result: AnalysisResult) -> None:
        """Save the decoded result next to the reports."""
        result_path = self.run_folder / "analysis.json"
        with open(result_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Analysis saved: {result_path}")

    def _generate_markdown_report(self, result: AnalysisResult) -> None:
        filename = self.output_config.get("markdown_filename", "roteiro_mensal.md")
        generator = MarkdownGenerator(output_dir=str(self.run_folder))
        try:
            path = generator.generate_report_file(
                result,
                self.session.address,
                self.session.sites,
                run_timestamp=self.run_timestamp,
                filename=filename,
            )
            logger.info(f"Markdown report saved: {path}")
        except ExportFailure as e:
            logger.error(f"Failed to generate markdown report: {e}")

    def _generate_pdf_report(self, result: AnalysisResult) -> None:
        """Generate the PDF report; failures do not affect the analysis result."""
        pdf_filename = self.output_config.get("pdf_filename", "roteiro_mensal.pdf")
        try:
            pdf_generator = PDFGenerator(
                output_dir=str(self.run_folder),
                run_timestamp=self.run_timestamp,
                config=self.output_config,
            )
            output_path = pdf_generator.generate_pdf_report(
                result,
                self.session.address,
                self.session.sites,
                filename=pdf_filename,
            )
            logger.info(f"PDF report saved: {output_path}")
        except ExportFailure as e:
            logger.error(f"{MESSAGES['export_failed']} ({e})", exc_info=True)


async def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from config.json"""
    config_path = config_path or Path(__file__).parent / "config.json"
    with open(config_path, "r", encoding="utf-8") as f:
        config = json.load(f)

    # Validate required fields
    if "home_address" not in config:
        raise ValueError("Missing required field 'home_address' in config.json")
    if "sites_file" not in config:
        raise ValueError("Missing required field 'sites_file' in config.json")

    mode = config.get("agenda_validation", {}).get("mode", "warn")
    if mode not in {m.value for m in AgendaValidationMode}:
        raise ValueError(f"Invalid agenda_validation.mode: {mode}")

    return config


async def main():
    """Main entry point for the route planner."""
    try:
        config = await load_config()
        planner = RoutePlanner(config)
        result = await planner.run()

        if result:
            logger.info(
                f"Planning complete! {len(result.monthly_agenda)} weeks scheduled "
                f"in {planner.run_folder}"
            )

    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)


if __name__ == "__main__":
    asyncio.run(main())
