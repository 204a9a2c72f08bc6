"""Data models for construction sites and analysis results."""

from .analysis import (
    AnalysisResult,
    Cluster,
    CurrentEvaluation,
    DayRoute,
    HousingComparison,
    HousingRecommendation,
    MonthAgenda,
    Visit,
    VisitDetail,
    WeekSchedule,
    visit_site_name,
)
from .constants import WEEKDAYS, AgendaValidationMode, Efficiency
from .errors import AnalysisDecodeError, AnalysisFailure, ExportFailure, InputValidationError
from .site import SiteRecord

__all__ = [
    "SiteRecord",
    "AnalysisResult",
    "Cluster",
    "CurrentEvaluation",
    "DayRoute",
    "HousingComparison",
    "HousingRecommendation",
    "MonthAgenda",
    "Visit",
    "VisitDetail",
    "WeekSchedule",
    "visit_site_name",
    "Efficiency",
    "AgendaValidationMode",
    "WEEKDAYS",
    "AnalysisDecodeError",
    "AnalysisFailure",
    "ExportFailure",
    "InputValidationError",
]
