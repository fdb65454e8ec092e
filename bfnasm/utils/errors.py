#!/usr/bin/env python3
from typing import Optional


class BFError(Exception):
    """Base class for bfnasm errors"""

    def __init__(self, message: str, location: Optional[object] = None):
        self.message = message
        self.location = location
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        """Format error message with its source location, if known"""
        if self.location is not None:
            return f"{self.location}: {self.message}"
        return self.message


class UsageError(BFError):
    """Bad command line arguments"""


class SourceError(BFError):
    """Reading the program or writing an artifact failed"""

    def __init__(self, message: str, path: str = "", reason: Optional[OSError] = None):
        self.path = path
        self.reason = reason
        if reason is not None:
            message = f"{message}: {reason.strerror or reason}"
        super().__init__(message)


class StructuralError(BFError):
    """Bracket structure of the program is invalid"""


class UnmatchedOpenError(StructuralError):
    def __init__(self, location: Optional[object] = None):
        super().__init__("unmatched '['", location)


class UnmatchedCloseError(StructuralError):
    def __init__(self, location: Optional[object] = None):
        super().__init__("unmatched ']'", location)


class NestingTooDeepError(StructuralError):
    def __init__(self, limit: int, location: Optional[object] = None):
        self.limit = limit
        super().__init__(f"loop nesting too deep (limit {limit})", location)


class ToolchainError(BFError):
    """External assembler or linker failed or is missing"""

    def __init__(self, tool: str, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()
        if detail:
            message = f"{message}: {detail[0]}"
        super().__init__(message)
