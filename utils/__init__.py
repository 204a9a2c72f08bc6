"""Utility modules for parsing input and generating reports."""

from .agenda_validator import CoverageReport, check_agenda_coverage
from .markdown_generator import MarkdownGenerator
from .pdf_generator import PDFGenerator
from .sheet_parser import parse_sites, validate_inputs

__all__ = [
    "parse_sites",
    "validate_inputs",
    "check_agenda_coverage",
    "CoverageReport",
    "MarkdownGenerator",
    "PDFGenerator",
]
