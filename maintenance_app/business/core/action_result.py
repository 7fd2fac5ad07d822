"""
Action Result Data Structure
Outcome of a mutation: validation failures are returned here instead of raised.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ActionResult:
    """Result of a business operation"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    warning: Optional[str] = None  # Non-fatal problem, e.g. an AI fallback was used
    status: int = 200  # HTTP status the presentation layer should use

    @classmethod
    def ok(cls, data=None, warning: Optional[str] = None) -> 'ActionResult':
        return cls(success=True, data=data, warning=warning)

    @classmethod
    def fail(cls, error: str, status: int = 400) -> 'ActionResult':
        return cls(success=False, error=error, status=status)

    @classmethod
    def not_found(cls, error: str) -> 'ActionResult':
        return cls.fail(error, status=404)

    @classmethod
    def conflict(cls, error: str) -> 'ActionResult':
        return cls.fail(error, status=409)

    def __bool__(self):
        return self.success

    def to_dict(self) -> Dict:
        """Convert ActionResult to dictionary for serialization"""
        result = {'success': self.success}
        if self.data is not None:
            result['data'] = self.data
        if self.error:
            result['error'] = self.error
        if self.warning:
            result['warning'] = self.warning
        return result
