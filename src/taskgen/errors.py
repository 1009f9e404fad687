"""Exception types raised by taskgen."""

from typing import Optional


class TaskGenError(Exception):
    """Base class for all taskgen errors."""
    pass


class ConditionParseError(TaskGenError):
    """Raised when a condition encoding cannot be interpreted at all."""
    pass


class CatalogFormatError(TaskGenError):
    """Raised when a catalog document is missing required keys or has bad values."""
    pass


class CSVParseError(CatalogFormatError):
    """Raised when CSV catalog parsing fails."""
    pass


class RegistryError(TaskGenError):
    """Raised when the field registry data cannot be loaded."""
    pass


class ConfigError(TaskGenError):
    """Raised when a generation config file is invalid."""
    pass


class TaskStoreError(TaskGenError):
    """Raised by TaskStore adapters when a batch write fails."""
    pass


class GenerationError(TaskGenError):
    """
    A generation run failed and nothing was persisted.

    Properties:
        stage: "assessment", "catalog", "evaluate" or "store"
        user_id: the user whose run failed
    """

    def __init__(self, stage: str, user_id: str, message: Optional[str] = None):
        self.stage = stage
        self.user_id = user_id
        super().__init__(message or f"Task generation failed for user '{user_id}' at stage '{stage}'")
