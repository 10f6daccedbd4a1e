import asyncio
import logging
from typing import Any, List, Protocol, Sequence

from selenium import webdriver
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.remote_connection import RemoteConnection
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from transcripts_machine.components.page_automation.agents import (
    decide_action,
    observe_elements,
)
from transcripts_machine.components.page_automation.schemas import (
    ObservedElement,
    PageElement,
)
from transcripts_machine.components.remote_session.schemas import RemoteSessionHandle
from transcripts_machine.config import AutomationSettings

_logger = logging.getLogger(__name__)

INTERACTIVE_SELECTOR = ", ".join(
    [
        "button",
        "a[href]",
        "[role='button']",
        "[role='menuitem']",
        "tp-yt-paper-button",
        "tp-yt-paper-item",
        "ytd-menu-service-item-renderer",
    ]
)
TEXT_SELECTOR = "body *"
TRANSCRIPT_PANEL_SELECTOR = "#segments-container *, ytd-transcript-segment-renderer *"

# Returns [[element, descriptor], ...] for visible elements matching a selector.
_SNAPSHOT_JS = """
const [selector, limit, ownTextOnly] = arguments;
const clean = (t) => (t || '').replace(/\\s+/g, ' ').trim();
const visible = (el) => {
  const rect = el.getBoundingClientRect();
  const style = window.getComputedStyle(el);
  return rect.width > 0 && rect.height > 0
    && style.visibility !== 'hidden' && style.display !== 'none';
};
const ownText = (el) => clean(Array.from(el.childNodes)
  .filter((node) => node.nodeType === Node.TEXT_NODE)
  .map((node) => node.textContent)
  .join(' '));
const out = [];
for (const el of document.querySelectorAll(selector)) {
  if (out.length >= limit) break;
  if (!visible(el)) continue;
  const text = ownTextOnly ? ownText(el) : clean(el.innerText).slice(0, 200);
  const label = clean(el.getAttribute('aria-label') || el.getAttribute('title'));
  if (!text && !label) continue;
  const classes = typeof el.className === 'string' ? clean(el.className) : '';
  out.push([el, {
    tag: el.tagName.toLowerCase(),
    id: el.id || '',
    classes: classes.slice(0, 120),
    label: label,
    text: text,
  }]);
}
return out;
"""


class PageActionError(RuntimeError):
    """A natural-language directive could not be mapped onto the page."""


class TranscriptPage(Protocol):
    """The page operations the extraction orchestrator relies on."""

    async def goto(self, url: str) -> None: ...

    async def wait_for_selector(self, selector: str, timeout: float) -> None: ...

    async def click(self, xpath: str, timeout: float) -> None: ...

    async def act(self, instruction: str) -> None: ...

    async def observe(
        self, instruction: str, selector: str = TEXT_SELECTOR
    ) -> List[ObservedElement]: ...

    async def close(self) -> None: ...


class _BrowserbaseConnection(RemoteConnection):
    """WebDriver connection that authenticates against a Browserbase session."""

    def __init__(self, remote_server_addr: str, signing_key: str):
        super().__init__(remote_server_addr)
        self._signing_key = signing_key

    def get_remote_connection_headers(self, parsed_url, keep_alive=False):  # noqa: ANN001
        headers = super().get_remote_connection_headers(parsed_url, keep_alive)
        headers.update({"x-bb-signing-key": self._signing_key})
        return headers


class SeleniumPage:
    """Drive a remote Browserbase browser through Selenium, with AI act/observe on top."""

    def __init__(self, driver: webdriver.Remote, settings: AutomationSettings):
        self._driver = driver
        self.settings = settings

    # Sync implementations (blocking I/O), run via asyncio.to_thread

    def _goto(self, url: str) -> None:
        self._driver.get(url)

    def _wait_for_selector(self, selector: str, timeout: float) -> None:
        WebDriverWait(self._driver, timeout).until(
            EC.presence_of_element_located((By.CSS_SELECTOR, selector))
        )

    def _click(self, xpath: str, timeout: float) -> None:
        element = WebDriverWait(self._driver, timeout).until(
            EC.element_to_be_clickable((By.XPATH, xpath))
        )
        self._click_element(element)

    def _click_element(self, element: WebElement) -> None:
        try:
            element.click()
        except ElementClickInterceptedException:
            _logger.debug("Native click intercepted, retrying through JavaScript")
            self._driver.execute_script("arguments[0].click();", element)

    def _wait_for_dom_settle(self) -> None:
        WebDriverWait(self._driver, self.settings.dom_settle_timeout).until(
            lambda driver: driver.execute_script("return document.readyState")
            == "complete"
        )

    def _snapshot(
        self, selector: str, limit: int, own_text_only: bool
    ) -> tuple[List[WebElement], List[PageElement]]:
        rows: List[Any] = (
            self._driver.execute_script(_SNAPSHOT_JS, selector, limit, own_text_only)
            or []
        )
        handles: List[WebElement] = []
        elements: List[PageElement] = []
        for index, (handle, descriptor) in enumerate(rows):
            handles.append(handle)
            elements.append(
                PageElement(
                    index=index,
                    tag=descriptor.get("tag", ""),
                    element_id=descriptor.get("id", ""),
                    classes=descriptor.get("classes", ""),
                    label=descriptor.get("label", ""),
                    text=descriptor.get("text", ""),
                )
            )
        return handles, elements

    def _quit(self) -> None:
        self._driver.quit()

    # Async API

    async def goto(self, url: str) -> None:
        await asyncio.to_thread(self._goto, url)

    async def wait_for_selector(self, selector: str, timeout: float) -> None:
        await asyncio.to_thread(self._wait_for_selector, selector, timeout)

    async def click(self, xpath: str, timeout: float) -> None:
        await asyncio.to_thread(self._click, xpath, timeout)

    async def act(self, instruction: str) -> None:
        """Carry out a natural-language directive on the current page."""
        handles, elements = await asyncio.to_thread(
            self._snapshot,
            INTERACTIVE_SELECTOR,
            self.settings.max_snapshot_elements,
            False,
        )
        decision = await decide_action(instruction, elements)

        if decision.action == "wait":
            await asyncio.to_thread(self._wait_for_dom_settle)
            return
        if decision.action == "click" and decision.element_index is not None:
            if not 0 <= decision.element_index < len(handles):
                raise PageActionError(
                    f"Action agent chose unknown element {decision.element_index}"
                )
            await asyncio.to_thread(
                self._click_element, handles[decision.element_index]
            )
            await asyncio.to_thread(self._wait_for_dom_settle)
            return
        raise PageActionError(f"No element on the page fulfils '{instruction}'")

    async def observe(
        self, instruction: str, selector: str = TEXT_SELECTOR
    ) -> List[ObservedElement]:
        """Return descriptions of the elements under ``selector`` matching ``instruction``.

        Large snapshots are split into chunks that each fit
        ``max_snapshot_characters`` and observed concurrently, so every element
        is shown to the agent; results keep page order. A snapshot with more than
        ``max_observe_elements`` elements raises ``PageActionError`` instead
        of being cut short.
        """
        limit = self.settings.max_observe_elements
        # One extra row tells a full snapshot apart from a cut-off one
        _, elements = await asyncio.to_thread(self._snapshot, selector, limit + 1, True)
        if len(elements) > limit:
            raise PageActionError(
                f"More than {limit} elements match '{selector}', refusing to observe a partial page"
            )

        chunks = chunk_snapshot(elements, self.settings.max_snapshot_characters)
        if len(chunks) > 1:
            _logger.info(
                "Observing %d elements in %d chunks", len(elements), len(chunks)
            )
        results = await asyncio.gather(
            *(observe_elements(instruction, chunk) for chunk in chunks)
        )
        return [element for result in results for element in result.elements]

    async def close(self) -> None:
        await asyncio.to_thread(self._quit)


def chunk_snapshot(
    elements: Sequence[PageElement], max_characters: int
) -> List[List[PageElement]]:
    """Split a snapshot into consecutive chunks of at most ``max_characters``.

    Order is preserved and no element is dropped; an element larger than the
    budget gets a chunk of its own.
    """
    chunks: List[List[PageElement]] = []
    current: List[PageElement] = []
    used = 0
    for element in elements:
        size = len(element.text) + len(element.label) + len(element.tag) + 8
        if current and used + size > max_characters:
            chunks.append(current)
            current, used = [], 0
        current.append(element)
        used += size
    if current:
        chunks.append(current)
    return chunks


def _connect_driver(
    handle: RemoteSessionHandle, settings: AutomationSettings
) -> webdriver.Remote:
    options = webdriver.ChromeOptions()
    if settings.headless:
        options.add_argument("--headless=new")
    connection = _BrowserbaseConnection(handle.selenium_remote_url, handle.signing_key)
    driver = webdriver.Remote(command_executor=connection, options=options)
    driver.set_page_load_timeout(settings.navigation_timeout)
    return driver


async def connect_remote_page(
    handle: RemoteSessionHandle, settings: AutomationSettings
) -> SeleniumPage:
    """Attach a Selenium driver to an existing Browserbase session."""
    if not handle.selenium_remote_url:
        raise PageActionError(f"Session {handle.session_id} has no WebDriver endpoint")

    for noisy in ("selenium", "urllib3"):
        logging.getLogger(noisy).setLevel(settings.browser_log_level.upper())

    try:
        driver = await asyncio.to_thread(_connect_driver, handle, settings)
    except WebDriverException as exc:
        _logger.error("Could not attach to session %s: %s", handle.session_id, exc)
        raise
    _logger.info("Attached WebDriver to session %s", handle.session_id)
    return SeleniumPage(driver, settings)

