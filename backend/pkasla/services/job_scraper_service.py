# backend/pkasla/services/job_scraper_service.py
"""
HTML job scraper.

Fetches a listing page, extracts one job per ``jobContainer`` match using
the configured CSS selectors and imports new jobs as pending drafts. Jobs
whose title and company already exist are skipped.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag
from pydantic import ValidationError
import requests
from sqlalchemy.orm import Session

from ..core.exceptions import BadGatewayException, ValidationException
from ..models.job import EmploymentType, JobStatus
from ..schemas.job import JobCreate
from .base import BaseService
from .cache_service import CacheService
from .job_feed_service import describe_validation_error
from .job_service import JobService

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15
DEFAULT_SCRAPE_LIMIT = 50
DEFAULT_LOCATION = "Remote"
USER_AGENT = "Mozilla/5.0 (compatible; PKASLA-JobScraper/1.0)"

REQUIRED_FIELDS = (
    ("url", "URL is required"),
    ("jobContainer", "Job container selector is required"),
    ("title", "Title selector is required"),
    ("company", "Company selector is required"),
    ("description", "Description selector is required"),
)

_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Return the list of problems with a scraping config (empty when valid)."""
    selectors = config.get("selectors") or {}
    errors = []
    for field, message in REQUIRED_FIELDS:
        source = config if field == "url" else selectors
        if not source.get(field):
            errors.append(message)
    return errors


def normalize_employment_type(text: Optional[str]) -> str:
    if not text:
        return EmploymentType.FULL_TIME.value
    key = re.sub(r"[\s-]+", "_", text.strip().lower())
    for kind in EmploymentType:
        if kind.value == key or kind.value.replace("_", "") == key.replace("_", ""):
            return kind.value
    if "intern" in key:
        return EmploymentType.INTERNSHIP.value
    if "contract" in key or "freelance" in key:
        return EmploymentType.CONTRACT.value
    if "part" in key:
        return EmploymentType.PART_TIME.value
    return EmploymentType.FULL_TIME.value


def parse_salary(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """``"$1,000 - $2,500"`` -> ``{min: 1000, max: 2500, currency: "USD"}``."""
    if not text:
        return None
    numbers = [float(match.replace(",", "")) for match in _NUMBER_RE.findall(text)]
    if not numbers:
        return None
    currency = "KHR" if ("KHR" in text.upper() or "៛" in text) else "USD"
    return {"min": min(numbers), "max": max(numbers), "currency": currency}


def _select_text(container: Tag, selector: Optional[str]) -> str:
    if not selector:
        return ""
    node = container.select_one(selector)
    return node.get_text(" ", strip=True) if node is not None else ""


def extract_jobs(html: str, selectors: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
    soup = BeautifulSoup(html, "html.parser")
    jobs = []
    for container in soup.select(selectors["jobContainer"])[:limit]:
        location = _select_text(container, selectors.get("location")) or DEFAULT_LOCATION
        tags = []
        if selectors.get("tags"):
            tags = [
                node.get_text(strip=True)
                for node in container.select(selectors["tags"])
                if node.get_text(strip=True)
            ]
        jobs.append(
            {
                "title": _select_text(container, selectors["title"]),
                "company": _select_text(container, selectors["company"]),
                "description": _select_text(container, selectors["description"]),
                "location": location,
                "isRemote": "remote" in location.lower(),
                "employmentType": normalize_employment_type(
                    _select_text(container, selectors.get("employmentType"))
                ),
                "salaryRange": parse_salary(_select_text(container, selectors.get("salary"))),
                "tags": tags,
            }
        )
    return jobs


class JobScraperService(BaseService):
    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        super().__init__(db, cache)
        self.jobs = JobService(db, cache)

    def fetch_page(self, url: str) -> str:
        try:
            response = requests.get(
                url, headers={"User-Agent": USER_AGENT}, timeout=REQUEST_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            self.logger.warning(f"Scrape fetch failed for {url}: {exc}")
            raise BadGatewayException(f"Failed to fetch {url}: {exc}")
        return response.text

    @BaseService.measure_operation("scrape_jobs")
    def scrape(self, config: Dict[str, Any], posted_by: str) -> Dict[str, Any]:
        errors = validate_config(config)
        if errors:
            raise ValidationException(f"Invalid scraping config: {', '.join(errors)}")

        limit = int(config.get("limit") or DEFAULT_SCRAPE_LIMIT)
        html = self.fetch_page(config["url"])
        scraped = extract_jobs(html, config["selectors"], limit)

        created = 0
        skipped = 0
        import_errors: List[str] = []
        for item in scraped:
            if self.jobs.repository.find_by_title_company(item["title"], item["company"]):
                skipped += 1
                continue
            try:
                data = JobCreate.model_validate({**item, "status": JobStatus.DRAFT.value})
                self.jobs.create_job(data, posted_by)
                created += 1
            except ValidationError as exc:
                import_errors.append(
                    f'Failed to import scraped job "{item["title"]}": {describe_validation_error(exc)}'
                )
        self.logger.info(f"Scraped {len(scraped)} jobs from {config['url']}: {created} created")
        return {"found": len(scraped), "created": created, "skipped": skipped, "errors": import_errors}
