"""
Canvas LMS client for one student account.
Lists active courses and their assignments and turns them into the complete
upstream snapshot the reconciler needs.
"""
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from config import get_canvas_account
from models.upstream import UpstreamRecord
from utils.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip().rstrip("/")
    if base_url and not base_url.startswith(("https://", "http://")):
        base_url = f"https://{base_url}"
    return base_url


def to_upstream_record(raw: Dict[str, Any], course: Dict[str, Any]) -> UpstreamRecord:
    """Map a Canvas assignment payload to an UpstreamRecord.

    ``graded_submissions_exist`` is the graded signal; a missing key means
    not graded.
    """
    return UpstreamRecord(
        upstream_id=raw.get("id"),
        title=raw.get("name") or "",
        due_at=raw.get("due_at"),
        graded_signal=raw.get("graded_submissions_exist"),
        course_id=raw.get("course_id", course.get("id")),
        course_name=course.get("name"),
    )


class CanvasClient:
    """One Canvas login: bearer token + paginated GETs with a bounded timeout."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 20,
        per_page: int = 100,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = _normalize_base_url(base_url)
        self.token = token
        self.timeout = timeout
        self.per_page = per_page
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Dict[str, Any], account_key: str) -> "CanvasClient":
        account = get_canvas_account(config, account_key)
        if not account["base_url"] or not account["token"]:
            raise UpstreamUnavailable(f"Canvas configuration missing for account {account_key!r}")
        canvas_cfg = config.get("canvas", {})
        return cls(
            base_url=account["base_url"],
            token=account["token"],
            timeout=canvas_cfg.get("timeout", 20),
            per_page=canvas_cfg.get("per_page", 100),
        )

    def _get_all(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint, following Link: rel="next"."""
        url = f"{self.base_url}/api/v1{endpoint}"
        headers = {"Authorization": f"Bearer {self.token}", "Accept": "application/json"}
        items: List[Dict[str, Any]] = []
        while url:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            if resp.status_code != 200:
                raise UpstreamUnavailable(f"Canvas API error: {resp.status_code} {resp.reason} for {endpoint}")
            page = resp.json()
            if not isinstance(page, list):
                raise UpstreamUnavailable(f"Canvas API returned a non-list payload for {endpoint}")
            items.extend(page)
            url = resp.links.get("next", {}).get("url")
            params = None  # the next link already carries the query string
        return items

    def get_courses(self) -> List[Dict[str, Any]]:
        return self._get_all("/courses", {"enrollment_state": "active", "per_page": self.per_page})

    def get_assignments(self, course_id) -> List[Dict[str, Any]]:
        return self._get_all(
            f"/courses/{course_id}/assignments",
            {"per_page": self.per_page, "include[]": ["submission", "all_dates"], "order_by": "due_at"},
        )

    def fetch_snapshot(self) -> List[UpstreamRecord]:
        """Return every assignment across the account's active courses.

        Any failure aborts the whole fetch: a snapshot missing one course
        would look like that course's assignments were deleted upstream.
        """
        try:
            courses = self.get_courses()
            records: List[UpstreamRecord] = []
            for course in courses:
                course_id = course.get("id")
                if course_id is None:
                    continue
                assignments = self.get_assignments(course_id)
                logger.debug("Canvas course %s (%s): %d assignments", course.get("name"), course_id, len(assignments))
                records.extend(to_upstream_record(raw, course) for raw in assignments)
        except requests.RequestException as exc:
            raise UpstreamUnavailable(f"Canvas request failed: {exc}") from exc
        except ValidationError as exc:
            raise UpstreamUnavailable(f"Malformed Canvas assignment: {exc}") from exc
        except ValueError as exc:
            raise UpstreamUnavailable(f"Canvas returned invalid JSON: {exc}") from exc
        logger.info("Canvas snapshot: %d assignments from %d courses", len(records), len(courses))
        return records
