"""Monthly insights report (Google Docs).

The document's plain text has one page header and any number of sections:

    ===== JAN 2026 CONSUMER INSIGHTS REPORT =====
    === EXECUTIVE SUMMARY ===
    ...
    === TOP OBJECTIONS ===
    ...

A section runs until the next ``=== ... ===`` header or the end of the text.
"""

import asyncio
import re

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from automation_console.app.config import (
    DOCS_SCOPE,
    GOOGLE_PRIVATE_KEY,
    GOOGLE_SERVICE_ACCOUNT_EMAIL,
    REPORT_DOC_ID,
)
from automation_console.app.errors import NotConfiguredError, ReportError
from automation_console.app.models.report import Report, ReportSection
from automation_console.app.services.logging_service import get_logger
from automation_console.app.services.sheets_client import authorized_http, google_credentials

logger = get_logger(__name__)

_TITLE_RE = re.compile(r"={5}\s*(.+?)\s*={5}")
_TITLE_BLOCK_RE = re.compile(r"={5}[\s\S]*?={5}")
_SECTION_RE = re.compile(r"===\s*([^=\n]+?)\s*===")
_TITLE_SUFFIX_RE = re.compile(r"\s*(consumer\s+insights\s+)?report\s*$", re.IGNORECASE)
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

PREVIEW_CHARS = 160

# First matching keyword wins
_SECTION_ICONS = [
    (("EXECUTIVE",), "📊"),
    (("VOICE", "CUSTOMER"), "💬"),
    (("JOBS", "JTBD"), "✅"),
    (("PAIN",), "🔴"),
    (("OBJECTION",), "🛡️"),
    (("TRIGGER", "CONVERSION"), "⚡"),
    (("PERSONA",), "👥"),
    (("COMPETITIVE", "INTELLIGENCE"), "🔍"),
    (("PRICE", "SENSITIVITY"), "💰"),
    (("TREND",), "📈"),
    (("STRATEGIC", "RECOMMENDATION"), "🎯"),
]
DEFAULT_SECTION_ICON = "📄"


def section_icon(title: str) -> str:
    upper = title.upper()
    for keywords, icon in _SECTION_ICONS:
        if any(keyword in upper for keyword in keywords):
            return icon
    return DEFAULT_SECTION_ICON


def preview(text: str) -> str:
    """First two sentences, or the first 160 characters when there are none."""
    cleaned = re.sub(r"\n+", " ", text).strip()
    sentences = _SENTENCE_RE.findall(cleaned)
    first_two = " ".join(s.strip() for s in sentences[:2]).strip()
    if first_two:
        return first_two
    suffix = "…" if len(cleaned) > PREVIEW_CHARS else ""
    return cleaned[:PREVIEW_CHARS].strip() + suffix


def parse_report(raw_text: str) -> Report:
    """Split report text into its month label and ordered sections."""
    title_match = _TITLE_RE.search(raw_text)
    month = _TITLE_SUFFIX_RE.sub("", title_match.group(1)).strip() if title_match else ""

    body = _TITLE_BLOCK_RE.sub("", raw_text, count=1).strip()
    headers = list(_SECTION_RE.finditer(body))

    sections = []
    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(body)
        content = body[header.end():end].strip()
        title = header.group(1).strip()
        sections.append(
            ReportSection(title=title, preview=preview(content), content=content, icon=section_icon(title))
        )
    return Report(month=month, sections=sections)


def extract_text(content: list[dict]) -> str:
    """Flatten Google Docs ``body.content`` (paragraphs and table cells) to text."""
    parts = []
    for element in content or []:
        if "paragraph" in element:
            for run in element["paragraph"].get("elements") or []:
                parts.append((run.get("textRun") or {}).get("content") or "")
        elif "table" in element:
            for row in element["table"].get("tableRows") or []:
                for cell in row.get("tableCells") or []:
                    parts.append(extract_text(cell.get("content") or []))
    return "".join(parts)


class ReportClient:
    """Fetches and parses the insights report document."""

    def __init__(
        self,
        email: str | None = None,
        private_key: str | None = None,
        document_id: str | None = None,
    ) -> None:
        self.email = GOOGLE_SERVICE_ACCOUNT_EMAIL if email is None else email
        self.private_key = GOOGLE_PRIVATE_KEY if private_key is None else private_key
        self.document_id = REPORT_DOC_ID if document_id is None else document_id

    def _fetch_body(self, credentials) -> list[dict]:
        service = build("docs", "v1", http=authorized_http(credentials), cache_discovery=False)
        document = service.documents().get(documentId=self.document_id, fields="body.content").execute()
        return (document.get("body") or {}).get("content") or []

    async def get_report(self) -> Report:
        credentials = google_credentials(self.email, self.private_key, [DOCS_SCOPE])
        if credentials is None:
            raise NotConfiguredError("Google credentials not configured")
        if not self.document_id:
            raise NotConfiguredError("Report document not configured (REPORT_DOC_ID)")

        try:
            body = await asyncio.to_thread(self._fetch_body, credentials)
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Fetching report {self.document_id} failed: {type(e).__name__}: {e}")
            raise ReportError(f"Could not load the report: {type(e).__name__}") from e

        if not body:
            return Report()
        report = parse_report(extract_text(body))
        logger.debug(f"Parsed report '{report.month}' with {len(report.sections)} sections")
        return report


# Global client instance
report_client = ReportClient()
