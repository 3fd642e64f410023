"""The ``get_doc_summary`` tool: validation, orchestration and result assembly."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .crawler import DocCrawler
from .dependencies import read_package_versions
from .errors import InternalToolError, InvalidArgumentsError, ToolError
from .llm import ModelConfig, summarize_text
from .schemas import PackageVersions

logger = logging.getLogger(__name__)

TOOL_NAME = "get_doc_summary"
TOOL_DESCRIPTION = (
    "Crawls documentation starting from a URL, summarizes combined text using "
    "Gemini, and optionally lists package versions."
)
TOOL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {
            "type": "string",
            "format": "uri",
            "description": "The starting URL of the documentation to crawl and process.",
        },
        "dependencyFile": {
            "type": "string",
            "description": "Optional path to package.json (relative to the server working directory).",
        },
    },
    "required": ["url"],
}
NO_DEPENDENCY_FILE_MESSAGE = "No dependency file provided."


def _is_absolute_url(value: str) -> bool:
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError for malformed ports
    except ValueError:
        return False
    return bool(parts.scheme and parts.hostname)


class GetDocSummaryArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str
    dependency_file: Optional[str] = Field(default=None, alias="dependencyFile")

    @field_validator("url")
    @classmethod
    def url_is_absolute(cls, value: str) -> str:
        if not _is_absolute_url(value):
            raise ValueError(f"Invalid URL format: {value}")
        return value

    @field_validator("dependency_file", mode="before")
    @classmethod
    def dependency_file_not_null(cls, value: Any) -> Any:
        # Omitting the key is fine; an explicit null is not a path.
        if value is None:
            raise ValueError("dependencyFile must be a string when provided")
        return value


class ToolResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    package_versions: PackageVersions = Field(alias="packageVersions")
    original_url: str = Field(alias="originalUrl")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def parse_arguments(arguments: Any) -> GetDocSummaryArgs:
    if not isinstance(arguments, dict):
        raise InvalidArgumentsError(
            'Invalid arguments. Requires "url" (string, valid URI) and optional '
            '"dependencyFile" (string).'
        )
    try:
        return GetDocSummaryArgs.model_validate(arguments)
    except ValidationError as exc:
        details = "; ".join(error["msg"] for error in exc.errors())
        raise InvalidArgumentsError(f"Invalid arguments: {details}") from exc


class DocSummaryTool:
    """Crawl, summarise and enrich a documentation URL for the tool host."""

    def __init__(
        self,
        model_config: ModelConfig,
        crawler: Optional[DocCrawler] = None,
        dependency_reader: Callable[[str], PackageVersions] = read_package_versions,
    ) -> None:
        self.model_config = model_config
        self.crawler = crawler or DocCrawler()
        self.dependency_reader = dependency_reader

    def run(self, arguments: Any) -> ToolResult:
        args = parse_arguments(arguments)
        url = args.url
        logger.info(
            "Processing crawl request for URL: %s%s",
            url,
            f" with dependency file: {args.dependency_file}" if args.dependency_file else "",
        )
        start = time.perf_counter()
        try:
            crawl = self.crawler.crawl(url)
            combined_text = crawl.text
            logger.info("Crawling complete. Total text length: %d", len(combined_text))

            logger.info("Summarizing combined text using %s", self.model_config.model)
            summary = summarize_text(combined_text, self.model_config)
        except ToolError:
            raise
        except Exception as exc:
            logger.exception("Error processing request for %s", url)
            raise InternalToolError(f"An unexpected error occurred: {exc}") from exc

        if summary.is_failure:
            raise InternalToolError(summary.text)
        logger.info("Summarization complete (%s).", summary.status.value)

        package_versions: PackageVersions = NO_DEPENDENCY_FILE_MESSAGE
        if args.dependency_file:
            logger.info("Processing dependency file: %s", args.dependency_file)
            package_versions = self._read_dependencies(args.dependency_file)
            if isinstance(package_versions, str):
                logger.warning("Dependency file processing result: %s", package_versions)
            else:
                logger.info("Found %d dependencies.", len(package_versions))

        result = ToolResult(
            summary=summary.text,
            package_versions=package_versions,
            original_url=url,
        )
        logger.info("Request processed in %.2fs", time.perf_counter() - start)
        return result

    def _read_dependencies(self, file_path: str) -> PackageVersions:
        try:
            return self.dependency_reader(file_path)
        except Exception as exc:
            logger.exception("Dependency reader failed for %s", file_path)
            return f"Error processing dependency file {file_path}: {exc}"

    def run_json(self, arguments: Any) -> str:
        return self.run(arguments).to_json()
