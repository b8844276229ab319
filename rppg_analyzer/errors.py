"""Exceptions raised by the analysis core and its execution boundary."""


class AnalysisError(Exception):
    """Base class for every error raised by :mod:`rppg_analyzer`."""


class InsufficientSamplesError(AnalysisError, ValueError):
    """Too few usable samples to estimate a heart rate."""


class InvalidRequestError(AnalysisError, ValueError):
    """A request payload failed validation."""


class ServiceBusyError(AnalysisError):
    """All analysis workers are occupied."""


class ProcessingTimeoutError(AnalysisError):
    """The analysis worker exceeded its wall-clock limit and was terminated."""


class ProcessingFailedError(AnalysisError):
    """The analysis worker raised or exited abnormally."""
