"""
Exception types raised by the pattern engine.

Only structurally invalid input crosses the engine boundary as an exception,
and only once, at load time. Everything downstream resolves missing data and
numerical degeneracy with documented defaults.
"""

from typing import List, Optional


class OCELPatternError(Exception):
    """Base class for all pattern engine errors."""


class OCELFormatError(OCELPatternError):
    """Raised when an OCEL document does not have the expected shape."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.problems = list(problems or [])
        if self.problems:
            detail = "; ".join(self.problems[:5])
            if len(self.problems) > 5:
                detail += f" (+{len(self.problems) - 5} more)"
            message = f"{message}: {detail}"
        super().__init__(message)
