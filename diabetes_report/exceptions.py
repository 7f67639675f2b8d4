"""Errors raised by the report pipeline. All of them end the run."""


class ReportError(Exception):
    """Base class for report pipeline errors."""


class DataValidationError(ReportError):
    """Input data does not match the expected schema or value domain."""


class MalformedLabelError(ReportError):
    """Outcome label is neither 'pos' nor 'neg'."""


class UnderdeterminedModelError(ReportError):
    """Not enough data to identify the logistic regression."""


class ConvergenceError(ReportError):
    """The logistic regression fit did not converge to finite estimates."""


class EmptyGroupError(ReportError):
    """An outcome group has no members, so its summaries are undefined."""
