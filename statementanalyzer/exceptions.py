"""Exceptions raised by the statement analyzer."""


class StatementAnalyzerError(Exception):
  """Base class for all analyzer errors."""


class DecodeError(StatementAnalyzerError):
  """A statement file could not be turned into pages of text."""


class ManualEntryError(StatementAnalyzerError, ValueError):
  """A manually entered transaction failed validation."""
