# src/jobharvest/clients/naukri.py
"""
Naukri search results.

Searches are plain URL templates ("<role>-jobs-in-<location>"), with the
experience and job-age filters as query params. Optionally a department
facet is clicked before reading the result list.
"""
from __future__ import annotations

import logging
from typing import Iterator

from playwright.sync_api import Error as PlaywrightError

from jobharvest.clients.base import JobSource, slugify
from jobharvest.clients.browser import BrowserSession, FieldSelector, PageDescriptor
from jobharvest.models import CategoryConfig, RawRecord

logger = logging.getLogger(__name__)

FILTER_CONTAINER = ".styles_filterContainer__4aQaD"
FILTER_LABEL = "label p span.styles_filterLabel__jRP04"
FRESHNESS_BUTTON = "#filter-freshness"
RESULT_LIST = ".list, .srp-jobtuple-wrapper, .jobTuple"

RESULTS = PageDescriptor(
    card_selector=".srp-jobtuple-wrapper, article.jobTuple",
    fields={
        "title": FieldSelector(".title, a[title]", attr="title"),
        "detail_url": FieldSelector(".title, a[title]", attr="href", text=False),
        "posted_date": FieldSelector(".job-post-day, span.fleft.postedDate"),
        "company": FieldSelector(".comp-name, a.subTitle"),
        "location": FieldSelector(".loc, .loc-wrap, span[title*='location']"),
        "experience": FieldSelector(".exp, .exp-wrap, span[title*='Exp']"),
    },
)


class NaukriSource(JobSource):
    name = "naukri"
    base_url = "https://www.naukri.com/"

    def search_url(self, config: CategoryConfig, location: str, role: str) -> str:
        return (
            f"{self.base_url}{slugify(role)}-jobs-in-{slugify(location)}"
            f"?experience={self.settings.experience_param}&jobAge={config.policy.recency_window_days}"
        )

    def _apply_facet(self, session: BrowserSession, facet: str) -> None:
        session.wait_for(FILTER_CONTAINER, timeout_ms=3000)
        if session.click_label(FILTER_LABEL, facet):
            logger.info("[naukri] applied filter: %s", facet)
            self._pause(3, 5)
        else:
            logger.debug("[naukri] filter %r not offered on this page", facet)

    def _ensure_freshness(self, session: BrowserSession, days: int) -> None:
        # the URL's jobAge is sometimes ignored; make the dropdown agree with it
        label = f"Last {days} day"
        current = session.text_of(FRESHNESS_BUTTON)
        if current is None or label in current:
            return
        option = f'a[data-id="filter-freshness-{days}"]'
        session.interact(FRESHNESS_BUTTON)
        if session.wait_for(option, timeout_ms=2000, visible=True):
            session.interact(option)
            self._pause(2, 4)

    def search(self, session: BrowserSession, config: CategoryConfig, location: str, role: str) -> Iterator[RawRecord]:
        url = self.search_url(config, location, role)
        logger.info('[naukri] searching for "%s" in "%s"', role, location)
        if not session.navigate(url):
            return
        self._pause(2, 4)

        # facet + freshness are refinements; the search is still usable without them
        if config.ui_filter:
            try:
                self._apply_facet(session, config.ui_filter)
            except PlaywrightError as e:
                logger.debug("[naukri] filter interaction skipped: %s", e)
        try:
            self._ensure_freshness(session, config.policy.recency_window_days)
        except PlaywrightError as e:
            logger.debug("[naukri] freshness interaction skipped: %s", e)

        if not session.wait_for(RESULT_LIST):
            logger.info("[naukri] no result list for %s / %s", role, location)

        records = session.extract(RESULTS)
        logger.info("[naukri] found %d raw jobs", len(records))
        yield from records
        self._pause(self.settings.delay_min / 2, self.settings.delay_max / 2)
