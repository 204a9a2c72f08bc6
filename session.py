"""Analysis session state: form input, in-flight flag, last result and error."""

import logging
from enum import Enum
from typing import List, Optional

from llm.base import AnalysisRequester
from models.analysis import AnalysisResult
from models.constants import AgendaValidationMode
from models.errors import AnalysisFailure, InputValidationError
from models.site import SiteRecord
from utils.agenda_validator import check_agenda_coverage
from utils.sheet_parser import parse_sites, validate_inputs
from utils.translations import MESSAGES

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Observable state of an analysis session."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class AnalysisSession:
    """
    Owns the state of one analysis session.

    State changes only through ``submit``, ``succeed``, ``fail`` and
    ``reset``:

    - Idle/Ready -> Loading on submit
    - Loading -> Ready on success
    - Loading -> Idle + error on failure (a prior result is left untouched)
    - any -> Idle on reset

    Only one request may be in flight at a time.
    """

    def __init__(
        self,
        requester: AnalysisRequester,
        agenda_validation: AgendaValidationMode = AgendaValidationMode.WARN,
    ):
        """
        Initialize the session.

        Args:
            requester: Backend used to obtain analysis results
            agenda_validation: How to treat agenda coverage violations
        """
        self.requester = requester
        self.agenda_validation = agenda_validation

        self.address: str = ""
        self.raw_input: str = ""
        self.sites: List[SiteRecord] = []
        self.loading: bool = False
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None

    @property
    def state(self) -> SessionState:
        if self.loading:
            return SessionState.LOADING
        if self.result is not None:
            return SessionState.READY
        return SessionState.IDLE

    def submit(self) -> None:
        if self.loading:
            raise RuntimeError("An analysis request is already in flight")
        self.loading = True
        self.error = None

    def succeed(self, result: AnalysisResult) -> None:
        self.loading = False
        self.result = result
        self.error = None

    def fail(self, message: str) -> None:
        self.loading = False
        self.error = message

    def reset(self) -> None:
        """Discard the current plan so a new one can be generated."""
        self.result = None
        self.error = None

    async def run_analysis(self, address: str, raw_input: str) -> SessionState:
        """
        Validate the form and request an analysis.

        Input problems set a validation message without calling the
        requester. Requester failures set one generic message; the cause is
        only logged.

        Args:
            address: Current home address
            raw_input: Rows pasted from the spreadsheet

        Returns:
            State after the attempt
        """
        if self.loading:
            logger.warning(MESSAGES["analysis_in_progress"])
            return self.state

        self.address = address
        self.raw_input = raw_input

        try:
            sites = parse_sites(raw_input)
            validate_inputs(address, sites)
        except InputValidationError as e:
            logger.info(f"Input rejected: {e.message}")
            self.error = e.message
            return self.state

        self.sites = sites
        self.submit()
        try:
            result = await self.requester.request_analysis(address, sites)
            self._check_coverage(sites, result)
        except AnalysisFailure as e:
            logger.error(f"Analysis failed: {e}", exc_info=True)
            self.fail(MESSAGES["analysis_failed"])
        except Exception as e:
            logger.error(f"Unexpected error during analysis: {e}", exc_info=True)
            self.fail(MESSAGES["analysis_failed"])
        else:
            self.succeed(result)

        return self.state

    def _check_coverage(self, sites: List[SiteRecord], result: AnalysisResult) -> None:
        if self.agenda_validation is AgendaValidationMode.OFF:
            return

        report = check_agenda_coverage(sites, result)
        if report.is_complete:
            return

        if self.agenda_validation is AgendaValidationMode.STRICT:
            raise AnalysisFailure(f"Monthly agenda coverage check failed: {report.describe()}")
        logger.warning(f"Monthly agenda is incomplete: {report.describe()}")
