"""Page content library for the notebook bridge.

This package validates outgoing page XML against the host schema, applying
a narrow exponent correction, and submits valid pages to the host.
"""

from .errors import ContentError, SchemaLoadError
from .schema_validator import (
    SchemaValidator,
    ValidationResult,
    Correction,
    correct_exponent_value,
)
from .page_updater import PageUpdater

__all__ = [
    'ContentError',
    'SchemaLoadError',
    'SchemaValidator',
    'ValidationResult',
    'Correction',
    'correct_exponent_value',
    'PageUpdater',
]
