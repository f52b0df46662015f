# src/jobharvest/clients/browser.py
"""
The one browser page a run scrapes with.

Adapters never touch Playwright directly; they go through BrowserSession,
which exposes three kinds of operation: navigate, extract (cards -> raw
records) and interact (click things). Every navigation and wait carries an
explicit timeout.
"""
from __future__ import annotations

import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from jobharvest.config import Settings
from jobharvest.models import RawRecord

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-blink-features=AutomationControlled"]


class SessionError(RuntimeError):
    """The browser could not be started at all. Fatal for the run."""


def random_delay(min_s: float, max_s: float) -> None:
    """Sleep a random amount between min_s and max_s seconds."""
    time.sleep(random.uniform(min_s, max_s))


@dataclass(frozen=True)
class FieldSelector:
    """
    Where one field lives inside a result card.

    `attr` is read first (e.g. href, title); if it is empty and `text` is
    True, the element's visible text is used instead.
    """

    selector: str
    attr: Optional[str] = None
    text: bool = True


@dataclass(frozen=True)
class PageDescriptor:
    """How to find result cards on a page and which fields to pull from each."""

    card_selector: str
    fields: Dict[str, FieldSelector]
    required: tuple = ("detail_url",)


class BrowserSession:
    def __init__(self, page: Page, nav_timeout_ms: int = 30000, selector_timeout_ms: int = 10000) -> None:
        self.page = page
        self.nav_timeout_ms = nav_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms

    @property
    def url(self) -> str:
        return self.page.url

    def navigate(self, url: str, timeout_ms: Optional[int] = None) -> bool:
        """Load `url`. False on timeout; any other navigation error is raised."""
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms or self.nav_timeout_ms)
            return True
        except PlaywrightTimeoutError:
            logger.warning("timed out loading %s", url)
            return False

    def wait_for(self, selector: str, timeout_ms: Optional[int] = None, visible: bool = False) -> bool:
        try:
            self.page.wait_for_selector(
                selector,
                timeout=timeout_ms or self.selector_timeout_ms,
                state="visible" if visible else "attached",
            )
            return True
        except PlaywrightTimeoutError:
            return False

    def extract(self, descriptor: PageDescriptor) -> List[RawRecord]:
        """One RawRecord per card that carries all required fields."""
        out: List[RawRecord] = []
        for card in self.page.query_selector_all(descriptor.card_selector):
            try:
                rec: RawRecord = {}
                for name, fs in descriptor.fields.items():
                    el = card.query_selector(fs.selector)
                    if el is None:
                        continue
                    value = el.get_attribute(fs.attr) if fs.attr else None
                    if not value and fs.text:
                        value = el.inner_text()
                    if value and value.strip():
                        rec[name] = value.strip()
            except PlaywrightError as e:
                # cards can detach while the list re-renders
                logger.debug("skipping unreadable card: %s", e)
                continue
            if all(rec.get(k) for k in descriptor.required):
                out.append(rec)
        return out

    def interact(self, selector: str, action: str = "click", timeout_ms: Optional[int] = None) -> bool:
        """Perform `action` on the first match. False if nothing matches."""
        el = self.page.query_selector(selector)
        if el is None:
            return False
        if action == "click":
            el.click(timeout=timeout_ms or self.selector_timeout_ms)
        elif action == "scroll":
            el.scroll_into_view_if_needed(timeout=timeout_ms or self.selector_timeout_ms)
        else:
            raise ValueError(f"Unknown action: {action}")
        return True

    def text_of(self, selector: str) -> Optional[str]:
        el = self.page.query_selector(selector)
        return el.inner_text() if el is not None else None

    def is_disabled(self, selector: str) -> Optional[bool]:
        """None when the element is absent, else whether it is disabled."""
        el = self.page.query_selector(selector)
        if el is None:
            return None
        classes = (el.get_attribute("class") or "").split()
        return el.is_disabled() or "disabled" in classes

    def click_label(self, label_selector: str, text: str) -> bool:
        """Click the <label> around the first element under `label_selector` whose text contains `text`."""
        for el in self.page.query_selector_all(label_selector):
            if text not in el.inner_text():
                continue
            el.scroll_into_view_if_needed(timeout=self.selector_timeout_ms)
            target = el.evaluate_handle("e => e.closest('label') || e").as_element()
            (target or el).click(timeout=self.selector_timeout_ms)
            return True
        return False

    def scroll_to_bottom(self, step_px: int = 800, max_steps: int = 15, pause_ms: int = 150) -> None:
        """Scroll down in steps so lazily loaded cards render."""
        for _ in range(max_steps):
            self.page.mouse.wheel(0, step_px)
            self.page.wait_for_timeout(pause_ms)
            at_bottom = self.page.evaluate(
                "() => window.innerHeight + window.scrollY >= document.body.offsetHeight"
            )
            if at_bottom:
                break


@contextmanager
def open_session(settings: Settings) -> Iterator[BrowserSession]:
    """
    Launch headless Chromium and yield a session on a fresh page.
    The browser is torn down on exit no matter how the block ends.
    """
    pw = None
    browser = None
    try:
        pw = sync_playwright().start()
        browser = pw.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
        context = browser.new_context(user_agent=settings.user_agent)
        context.set_default_timeout(settings.selector_timeout_ms)
        context.set_default_navigation_timeout(settings.nav_timeout_ms)
        page = context.new_page()
    except PlaywrightError as e:
        if browser is not None:
            browser.close()
        if pw is not None:
            pw.stop()
        raise SessionError(f"Could not start browser: {e}") from e

    try:
        yield BrowserSession(page, settings.nav_timeout_ms, settings.selector_timeout_ms)
    finally:
        try:
            browser.close()
        except PlaywrightError as e:
            logger.warning("error closing browser: %s", e)
        pw.stop()
