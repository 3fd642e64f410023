"""Errors surfaced to the tool host as protocol-level failures."""
from __future__ import annotations

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND


class ToolError(Exception):
    """Base class for failures that abort a tool call."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentsError(ToolError):
    code = INVALID_PARAMS


class UnknownToolError(ToolError):
    code = METHOD_NOT_FOUND


class InternalToolError(ToolError):
    code = INTERNAL_ERROR


class CrawlError(InternalToolError):
    """The start page could not be loaded and no text was gathered."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Crawling failed for {url}: {cause}")
        self.url = url
        self.cause = cause
