"""Formatting of extracted page text into digest input."""

from dataclasses import dataclass
from typing import Optional

from visua11y.config import config

ELLIPSIS = "..."


@dataclass
class PageContent:
    """
    Text extracted from a page by the host.

    Attributes:
        title: Document title
        url: Page URL
        body: Visible body text
        description: Meta or Open Graph description, if any
    """

    title: str = ""
    url: str = ""
    body: str = ""
    description: str = ""


def truncate_body(body: str, max_chars: int) -> str:
    """Cut body text to max_chars, marking the cut with an ellipsis."""
    if len(body) > max_chars:
        return body[:max_chars] + ELLIPSIS
    return body


def format_page_content(page: PageContent, max_chars: Optional[int] = None) -> str:
    """
    Build the digest input for a page.

    Args:
        page: Extracted page text
        max_chars: Body budget (default: config.PAGE_CONTENT_MAX_CHARS)

    Returns:
        Title, URL, optional description and body, separated by blank lines
    """
    budget = max_chars or config.PAGE_CONTENT_MAX_CHARS
    sections = [
        f"Title: {page.title}",
        f"URL: {page.url}",
    ]
    if page.description:
        sections.append(f"Description: {page.description}")
    sections.append(f"Page Content: {truncate_body(page.body, budget)}")
    return "\n\n".join(sections).strip()
