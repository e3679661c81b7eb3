"""
Library exceptions.

Every error raised by graphparser derives from ``GraphParserError`` so callers
can catch the whole family at once and report it through ``to_dict``.
"""

from typing import Any, Dict, Optional


class GraphParserError(Exception):
    """Base exception for graphparser errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Standardized error payload for reporting"""
        return {
            "error": {
                "type": self.__class__.__name__,
                "message": self.message,
                "details": self.details,
            }
        }


class SamplingError(GraphParserError):
    """Raised when a sampling run exceeds the configured sample limit"""

    def __init__(self, expression: str, max_samples: int):
        super().__init__(
            message=f"Sampling '{expression}' exceeded {max_samples} samples",
            details={"expression": expression, "max_samples": max_samples}
        )
