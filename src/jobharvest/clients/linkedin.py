# src/jobharvest/clients/linkedin.py
"""
LinkedIn guest job search.

Unlike Naukri, the search is keyword + geo params on one URL, and results
span several pages behind a "Next" button. Cards never show experience.
"""
from __future__ import annotations

import logging
from typing import Iterator
from urllib.parse import urlencode

from playwright.sync_api import Error as PlaywrightError

from jobharvest.clients.base import JobSource
from jobharvest.clients.browser import BrowserSession, FieldSelector, PageDescriptor
from jobharvest.models import CategoryConfig, RawRecord

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.linkedin.com/jobs/search"
NEXT_BUTTON = 'button[data-testid="pagination-controls-next-button-visible"], button[aria-label="Next"]'

# Class names are obfuscated and change; the data attribute and the
# guest-view classes have been the stable ones.
RESULTS = PageDescriptor(
    card_selector='div[data-view-name="job-search-job-card"], li .base-card',
    fields={
        "title": FieldSelector(".job-card-list__title, h3.base-search-card__title"),
        "detail_url": FieldSelector("a.job-card-list__title, a.base-card__full-link", attr="href", text=False),
        "company": FieldSelector(".job-card-container__company-name, h4.base-search-card__subtitle"),
        "location": FieldSelector(".job-card-container__metadata-item, span.job-search-card__location"),
        "posted_date": FieldSelector("time"),
    },
    required=("detail_url", "title"),
)


class LinkedInSource(JobSource):
    name = "linkedin"
    base_url = "https://www.linkedin.com/"
    exposes_experience = False

    def search_url(self, config: CategoryConfig, location: str, role: str) -> str:
        params = {
            "keywords": role,
            "location": location,
            "geoId": self.settings.linkedin_geo_id,
            # f_TPR is "posted within N seconds"
            "f_TPR": f"r{config.policy.recency_window_days * 86400}",
            "position": 1,
            "pageNum": 0,
        }
        return f"{SEARCH_URL}?{urlencode(params)}"

    def _next_page(self, session: BrowserSession) -> bool:
        """Click Next if there is an enabled one. False means stop paginating."""
        disabled = session.is_disabled(NEXT_BUTTON)
        if disabled is None:
            logger.info("[linkedin] no next button; stopping pagination")
            return False
        if disabled:
            logger.info("[linkedin] next button disabled; stopping pagination")
            return False
        logger.info("[linkedin] clicking next page")
        session.interact(NEXT_BUTTON)
        self._pause(3, 6)
        return True

    def search(self, session: BrowserSession, config: CategoryConfig, location: str, role: str) -> Iterator[RawRecord]:
        self._pause(self.settings.delay_min, self.settings.delay_max)
        logger.info('[linkedin] searching for "%s" in "%s"', role, location)
        if not session.navigate(self.search_url(config, location, role)):
            return
        self._pause(2, 5)

        max_pages = self.settings.linkedin_max_pages
        for page_no in range(1, max_pages + 1):
            session.scroll_to_bottom()
            self._pause(2, 3)

            records = session.extract(RESULTS)
            logger.info("[linkedin] found %d raw jobs on page %d", len(records), page_no)
            yield from records

            if page_no >= max_pages:
                break
            try:
                if not self._next_page(session):
                    break
            except PlaywrightError as e:
                logger.warning("[linkedin] pagination error: %s", e)
                break
