"""Fatal error hierarchy.

Row-level problems never raise: they travel as ``Failed`` results and
``ExceptionRecord`` values. The classes below are reserved for conditions that
abort the whole run.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures that terminate a reconciliation run."""


class ConfigLoadError(PipelineError):
    """Configuration file missing, malformed or failing validation."""


class CsvSourceError(PipelineError):
    """An input file could not be opened or decoded, or has no header line."""


class TransformerError(PipelineError):
    """Unexpected fault inside the reconciliation logic itself."""


class SinkWriteError(PipelineError):
    """An output channel could not be opened, written or finalized."""
