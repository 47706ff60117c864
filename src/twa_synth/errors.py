"""
TWA Synthetic Wellness - Error Taxonomy
=======================================
Configuration errors are raised before any sampling begins, so callers
never receive a partial dataset.
"""


class TWASynthError(Exception):
    """Base class for all dataset generation and validation errors"""


class InvalidConfiguration(TWASynthError, ValueError):
    """Raised for non-positive subject/month counts or malformed config files"""


class InsufficientData(TWASynthError, ValueError):
    """Raised when validation is requested on an empty record collection"""


class GenerationCancelled(TWASynthError):
    """Raised when a cooperative cancellation check fires between subjects"""

    def __init__(self, subjects_completed: int, subject_count: int):
        self.subjects_completed = subjects_completed
        self.subject_count = subject_count
        super().__init__(
            f"Generation cancelled after {subjects_completed:,} of {subject_count:,} subjects"
        )
