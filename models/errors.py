"""Error taxonomy for the analysis workflow."""


class InputValidationError(Exception):
    """Form input cannot be submitted (missing address or site rows)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AnalysisDecodeError(ValueError):
    """The collaborator reply does not match the analysis result shape."""


class AnalysisFailure(Exception):
    """Transport, collaborator or decode failure while requesting an analysis."""


class ExportFailure(Exception):
    """Rendering the report document failed."""
