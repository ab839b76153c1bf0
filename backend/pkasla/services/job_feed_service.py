# backend/pkasla/services/job_feed_service.py
"""
Job feed import/export.

Exports published, approved jobs as JSON feed items or as an XML document
and imports feed items back as draft postings awaiting approval.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from xml.etree import ElementTree
from xml.sax.saxutils import escape

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..models.job import ApprovalStatus, Job, JobStatus
from ..schemas.job import JobCreate
from ..utils.time_utils import to_iso
from .base import BaseService
from .cache_service import CacheService
from .job_service import JobService

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_LIMIT = 1000
XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}
FEED_ONLY_KEYS = ("id", "url", "postedDate")


def escape_xml(value: Any) -> str:
    return escape(str(value), XML_ENTITIES)


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def job_to_feed_item(job: Job) -> Dict[str, Any]:
    return {
        "id": job.id,
        "title": job.title,
        "company": job.company,
        "description": job.description,
        "employmentType": job.employment_type,
        "location": job.location,
        "isRemote": bool(job.is_remote),
        "tags": list(job.tags or []),
        "salaryRange": job.salary_range,
        "postedDate": to_iso(job.created_at),
        "expiresAt": to_iso(job.expires_at),
    }


def render_jobs_xml(items: Iterable[Dict[str, Any]]) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<jobs>"]
    for item in items:
        lines.append("  <job>")
        lines.append(f"    <id>{escape_xml(item.get('id') or '')}</id>")
        lines.append(f"    <title>{escape_xml(item['title'])}</title>")
        lines.append(f"    <company>{escape_xml(item['company'])}</company>")
        description = str(item["description"]).replace("]]>", "]]]]><![CDATA[>")
        lines.append(f"    <description><![CDATA[{description}]]></description>")
        lines.append(f"    <employmentType>{escape_xml(item['employmentType'])}</employmentType>")
        lines.append(f"    <location>{escape_xml(item['location'])}</location>")
        lines.append(f"    <isRemote>{'true' if item['isRemote'] else 'false'}</isRemote>")
        if item.get("tags"):
            lines.append("    <tags>")
            lines.extend(f"      <tag>{escape_xml(tag)}</tag>" for tag in item["tags"])
            lines.append("    </tags>")
        salary = item.get("salaryRange")
        if salary:
            lines.append("    <salaryRange>")
            lines.append(f"      <min>{salary['min']}</min>")
            lines.append(f"      <max>{salary['max']}</max>")
            lines.append(f"      <currency>{escape_xml(salary['currency'])}</currency>")
            lines.append("    </salaryRange>")
        if item.get("url"):
            lines.append(f"    <url>{escape_xml(item['url'])}</url>")
        if item.get("postedDate"):
            lines.append(f"    <postedDate>{item['postedDate']}</postedDate>")
        if item.get("expiresAt"):
            lines.append(f"    <expiresAt>{item['expiresAt']}</expiresAt>")
        lines.append("  </job>")
    lines.append("</jobs>")
    return "\n".join(lines)


def _text(element: ElementTree.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _number(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0


def parse_jobs_xml(document: str) -> List[Dict[str, Any]]:
    """Parse a ``<jobs><job>...</job></jobs>`` document into feed items."""
    root = ElementTree.fromstring(document)
    nodes = [root] if root.tag == "job" else root.iter("job")
    items = []
    for node in nodes:
        item: Dict[str, Any] = {
            "title": _text(node, "title"),
            "company": _text(node, "company"),
            "description": _text(node, "description"),
            "employmentType": _text(node, "employmentType") or "full_time",
            "location": _text(node, "location"),
            "isRemote": _text(node, "isRemote").lower() == "true",
        }
        tags = [tag.text.strip() for tag in node.iter("tag") if tag.text and tag.text.strip()]
        if tags:
            item["tags"] = tags
        salary = node.find("salaryRange")
        if salary is not None:
            item["salaryRange"] = {
                "min": _number(_text(salary, "min")),
                "max": _number(_text(salary, "max")),
                "currency": _text(salary, "currency") or "USD",
            }
        for optional in ("url", "postedDate", "expiresAt"):
            value = _text(node, optional)
            if value:
                item[optional] = value
        items.append(item)
    return items


class JobFeedService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.jobs = JobService(db, cache)

    @BaseService.measure_operation("export_jobs")
    def export_items(
        self,
        *,
        status: Optional[str] = None,
        approval_status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        jobs = self.jobs.repository.list_for_feed(
            status=status or JobStatus.PUBLISHED.value,
            approval_status=approval_status or ApprovalStatus.APPROVED.value,
            limit=limit or DEFAULT_EXPORT_LIMIT,
        )
        return [job_to_feed_item(job) for job in jobs]

    def export_xml(self, **filters: Any) -> str:
        return render_jobs_xml(self.export_items(**filters))

    @BaseService.measure_operation("import_jobs")
    def import_items(self, items: List[Any], posted_by: str) -> Dict[str, Any]:
        """Create one pending draft per feed item; failures are collected, not raised."""
        created = 0
        errors: List[str] = []
        for raw in items:
            item = raw if isinstance(raw, dict) else {}
            title = item.get("title") or ""
            try:
                payload = {key: value for key, value in item.items() if key not in FEED_ONLY_KEYS}
                payload["status"] = JobStatus.DRAFT.value
                data = JobCreate.model_validate(payload)
                self.jobs.create_job(data, posted_by)
                created += 1
            except ValidationError as exc:
                errors.append(f'Failed to import job "{title}": {describe_validation_error(exc)}')
            except Exception as exc:
                self.logger.warning(f"Feed import of {title!r} failed: {exc}")
                errors.append(f'Failed to import job "{title}": {exc}')
        self.logger.info(f"Imported {created} jobs with {len(errors)} errors")
        return {"created": created, "errors": errors}

    def import_xml(self, document: str, posted_by: str) -> Dict[str, Any]:
        try:
            items = parse_jobs_xml(document)
        except ElementTree.ParseError as exc:
            return {"created": 0, "errors": [f"Failed to parse XML: {exc}"]}
        return self.import_items(items, posted_by)
