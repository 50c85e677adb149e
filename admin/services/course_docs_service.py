"""
Course documentation links.

Admins curate the reference pages the agent tutor cites. Page text can be
pulled from the link and cached on the row.
"""

import logging
from typing import Optional
import httpx
from bs4 import BeautifulSoup
from sqlalchemy.orm import Session as DBSession

from config import get_settings
from shared.models.entities import CourseDoc
from shared.repositories import CourseDocRepository
from shared.utils.exceptions import DocumentNotFoundException, DocumentFetchException

logger = logging.getLogger("admin.course_docs_service")

DEFAULT_COURSE_DOCS: dict[str, str] = {
    "overview": "https://docs.convex.dev/understanding/",
    "queries": "https://docs.convex.dev/functions/query-functions",
    "mutations": "https://docs.convex.dev/functions/mutation-functions",
    "actions": "https://docs.convex.dev/functions/actions",
    "schemas": "https://docs.convex.dev/database/schemas",
    "indexes": "https://docs.convex.dev/database/reading-data/indexes/",
    "react": "https://docs.convex.dev/client/react",
}


def extract_page_text(html: str) -> str:
    """Visible text of an HTML page with scripts, styles and blank lines removed."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


class CourseDocsService:
    """CRUD and content refresh for course documentation links."""

    def __init__(self, db: DBSession):
        self.db = db
        self.repo = CourseDocRepository(db)

    def get_course_docs(self) -> list[CourseDoc]:
        return self.repo.get_all()

    def get_active_docs(self) -> list[CourseDoc]:
        return self.repo.get_active()

    def upsert_course_doc(
        self,
        doc_type: str,
        url: str,
        content: Optional[str] = None,
        is_active: bool = True,
        updated_by: Optional[str] = None,
    ) -> CourseDoc:
        doc = self.repo.upsert(doc_type, url, content, is_active, updated_by)
        logger.info(f"Doc link {doc_type} saved (active={is_active}, by {updated_by})")
        return doc

    def delete_course_doc(self, doc_type: str) -> None:
        doc = self.repo.get_by_type(doc_type)
        if not doc:
            raise DocumentNotFoundException(doc_type)
        self.repo.delete(doc)
        logger.info(f"Doc link {doc_type} deleted")

    def refresh_doc_content(
        self,
        doc_type: str,
        url: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> CourseDoc:
        """Touch the fetch timestamp (and optionally the URL) without downloading."""
        doc = self.repo.get_by_type(doc_type)
        if not doc:
            raise DocumentNotFoundException(doc_type)
        return self.repo.upsert(doc_type, url or doc.url, None, doc.is_active, updated_by)

    def fetch_and_update_doc_content(
        self,
        doc_type: str,
        url: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> CourseDoc:
        """
        Download the page, store its text (truncated) and bump the fetch time.

        Raises:
            DocumentNotFoundException: If no URL is given and the doc does not exist
            DocumentFetchException: If the HTTP request fails
        """
        existing = self.repo.get_by_type(doc_type)
        target_url = url or (existing.url if existing else None)
        if not target_url:
            raise DocumentNotFoundException(doc_type)

        settings = get_settings()
        try:
            response = httpx.get(
                target_url,
                timeout=settings.doc_fetch_timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Fetching {doc_type} from {target_url} failed: {e}")
            raise DocumentFetchException(target_url, e) from e

        content = extract_page_text(response.text)[: settings.doc_max_content_chars]
        is_active = existing.is_active if existing else True
        doc = self.repo.upsert(doc_type, target_url, content, is_active, updated_by)
        logger.info(f"Fetched {len(content)} chars for doc {doc_type}")
        return doc

    def refresh_all_active_docs(self, updated_by: Optional[str] = None) -> dict:
        """Fetch every active doc; a failing page does not stop the rest."""
        refreshed, failed = [], []
        for doc in self.repo.get_active():
            try:
                self.fetch_and_update_doc_content(doc.doc_type, doc.url, updated_by)
                refreshed.append(doc.doc_type)
            except DocumentFetchException:
                failed.append(doc.doc_type)
        return {"refreshed": refreshed, "failed": failed}

    def initialize_course_docs(self, updated_by: str = "admin") -> list[CourseDoc]:
        """Seed the default documentation links that are missing."""
        created = []
        for doc_type, url in DEFAULT_COURSE_DOCS.items():
            if self.repo.get_by_type(doc_type):
                continue
            created.append(self.repo.upsert(doc_type, url, "", True, updated_by))
        if created:
            logger.info(f"Initialized {len(created)} documentation links")
        return created
