"""Exception types shared across coursecheck."""

from __future__ import annotations


class CourseCheckError(Exception):
    """Base class for errors that abort a coursecheck run."""


class ConfigError(CourseCheckError):
    """Configuration file is missing, malformed, or fails validation."""


class ContentError(CourseCheckError):
    """Content root cannot be read."""


class FrontmatterError(CourseCheckError):
    """Front matter block could not be split or parsed.

    ``line`` is the 1-based line in the source file where the problem was
    detected, when known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)
