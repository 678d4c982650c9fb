class HealthScanError(Exception):
    pass


class KnowledgeBaseError(HealthScanError, ValueError):
    """The ingredient table handed to the engine is not a usable sequence."""


class OCRError(HealthScanError):
    """Text could not be read from an image."""
