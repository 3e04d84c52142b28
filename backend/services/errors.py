"""Exceptions shared across ReportChat services."""


class ConfigurationError(ValueError):
    """A required credential or setting is missing."""


class VectorStoreError(RuntimeError):
    """The external vector collection rejected or failed an operation."""


class DocumentDecodeError(ValueError):
    """An uploaded document could not be decoded into something the extraction model accepts."""


class ExtractionError(RuntimeError):
    """The extraction model's output did not match the expected shape."""


class RepositoryError(RuntimeError):
    """The report record store failed an operation."""


class ReportNotFoundError(LookupError):
    """No report with the given id exists for the given owner."""


class StorageError(RuntimeError):
    """The object store holding uploaded files failed an operation."""
