"""Shared data structures used across modules."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Union

PAGE_SEPARATOR = "\n\n---\n\n"
INTERRUPTED_MARKER = "\n\n[Crawling interrupted due to error]"

DependencyMap = Dict[str, str]
PackageVersions = Union[DependencyMap, str]


@dataclass(slots=True)
class CrawlResult:
    start_url: str
    page_texts: List[str] = field(default_factory=list)
    visited_pages: List[str] = field(default_factory=list)
    interrupted: bool = False

    @property
    def text(self) -> str:
        combined = "".join(text + PAGE_SEPARATOR for text in self.page_texts)
        if self.interrupted:
            combined += INTERRUPTED_MARKER
        return combined


class SummaryStatus(str, enum.Enum):
    OK = "ok"
    NO_CONTENT = "no_content"
    BLOCKED = "blocked"
    INCOMPLETE = "incomplete"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SummaryResult:
    """Outcome of a summarisation attempt.

    Every status except ``FAILED`` is a usable answer for the caller, even
    when the text only describes why no summary was produced.
    """

    status: SummaryStatus
    text: str

    @property
    def is_failure(self) -> bool:
        return self.status is SummaryStatus.FAILED
