"""
Heuristic element resolution.

Maps a human-style identifier ("Email", "Sign in") to a concrete, visible
element. Each heuristic is a ``CandidateStrategy`` that turns the identifier
into a Playwright selector; strategies are tried in order and the first one
whose first match becomes visible within a bounded wait wins. An element that
exists but stays hidden counts as not found.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_ASCII_LOWER = str.maketrans(_UPPER, _LOWER)

# Substrings Playwright uses when it refuses to parse a selector
_SELECTOR_ERROR_MARKERS = ("selector", "xpath")


def is_selector_error(error: Exception) -> bool:
    """True if Playwright rejected the selector itself rather than failing to run it."""
    message = str(getattr(error, "message", None) or error).lower()
    return any(marker in message for marker in _SELECTOR_ERROR_MARKERS)


def css_string(value: str) -> str:
    """Escape a value for use inside a double-quoted CSS string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def xpath_literal(value: str) -> str:
    """Quote a value as an XPath string literal, using concat() when it holds both quote kinds."""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    parts = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


@dataclass(frozen=True)
class CandidateStrategy:
    """
    One location rule.

    Attributes:
        name: Short label used in logs and tests.
        build: Maps (identifier, type_hint) to a selector, or None to skip the rule.
    """
    name: str
    build: Callable[[str, Optional[str]], Optional[str]]

    def selector_for(self, identifier: str, type_hint: Optional[str] = None) -> Optional[str]:
        return self.build(identifier, type_hint)


@dataclass
class Resolution:
    """A visible element together with the rule that found it."""
    locator: Locator
    strategy: str
    selector: str


# --- Click target rules ---

CLICK_STRATEGIES = (
    CandidateStrategy("button_text", lambda i, _t: f'button:has-text("{css_string(i)}")'),
    CandidateStrategy("link_text", lambda i, _t: f'a:has-text("{css_string(i)}")'),
    CandidateStrategy("input_placeholder", lambda i, _t: f'input[placeholder*="{css_string(i)}" i]'),
    CandidateStrategy("aria_label", lambda i, _t: f'[aria-label*="{css_string(i)}" i]'),
    CandidateStrategy("label_text", lambda i, _t: f'label:has-text("{css_string(i)}")'),
    CandidateStrategy("page_text", lambda i, _t: f"text={i}"),
    CandidateStrategy("raw_selector", lambda i, _t: i),
)


# --- Fill target rules ---

def _typed_placeholder(identifier: str, type_hint: Optional[str]) -> Optional[str]:
    if not type_hint:
        return None
    return f'input[type="{css_string(type_hint)}"][placeholder*="{css_string(identifier)}" i]'


def _label_sibling(identifier: str, _type_hint: Optional[str]) -> str:
    label = f'label:has-text("{css_string(identifier)}")'
    return f"{label} + input, {label} ~ input"


def _label_following(identifier: str, _type_hint: Optional[str]) -> str:
    # translate() below folds A-Z only, so the needle must be folded the same way
    needle = xpath_literal(identifier.translate(_ASCII_LOWER))
    return (
        f"//label[contains(translate(normalize-space(.), '{_UPPER}', '{_LOWER}'), {needle})]"
        f"/following::input[1]"
    )


FIELD_STRATEGIES = (
    CandidateStrategy("typed_placeholder", _typed_placeholder),
    CandidateStrategy("placeholder", lambda i, _t: f'input[placeholder*="{css_string(i)}" i]'),
    CandidateStrategy("aria_label", lambda i, _t: f'input[aria-label*="{css_string(i)}" i]'),
    CandidateStrategy("name", lambda i, _t: f'input[name*="{css_string(i)}" i]'),
    CandidateStrategy("id", lambda i, _t: f'input[id*="{css_string(i)}" i]'),
    CandidateStrategy("label_sibling", _label_sibling),
    CandidateStrategy("label_following", _label_following),
)


class ElementResolver:
    """
    Tries candidate strategies in order and returns the first visible match.
    """

    def __init__(
        self,
        visibility_timeout_ms: int = 3000,
        click_strategies: Sequence[CandidateStrategy] = CLICK_STRATEGIES,
        field_strategies: Sequence[CandidateStrategy] = FIELD_STRATEGIES,
    ) -> None:
        self.visibility_timeout_ms = visibility_timeout_ms
        self.click_strategies = tuple(click_strategies)
        self.field_strategies = tuple(field_strategies)

    async def resolve(
        self,
        page: Page,
        identifier: str,
        strategies: Sequence[CandidateStrategy],
        type_hint: Optional[str] = None,
    ) -> Optional[Resolution]:
        """
        Return the first strategy whose first match is visible, or None.

        Parameters:
            page (Page): The page to search.
            identifier (str): Caller-supplied label, placeholder, name or selector.
            strategies (Sequence[CandidateStrategy]): Rules in precedence order.
            type_hint (Optional[str]): Optional element/field type passed to each rule.

        Returns:
            Optional[Resolution]: The match, or None if no rule produced a visible element.

        Raises:
            PlaywrightError: For engine failures other than a rejected selector,
                such as a closed page.
        """
        for strategy in strategies:
            selector = strategy.selector_for(identifier, type_hint)
            if not selector:
                continue

            locator = page.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=self.visibility_timeout_ms)
            except PlaywrightTimeoutError:
                logger.debug(f"[{strategy.name}] no visible match for {selector!r}")
                continue
            except PlaywrightError as e:
                if not is_selector_error(e):
                    raise
                logger.debug(f"[{strategy.name}] selector {selector!r} rejected: {e}")
                continue

            logger.debug(f"Resolved {identifier!r} with [{strategy.name}] {selector!r}")
            return Resolution(locator=locator, strategy=strategy.name, selector=selector)

        return None

    async def resolve_click_target(self, page: Page, identifier: str) -> Optional[Resolution]:
        """Resolve a button, link or other clickable element."""
        return await self.resolve(page, identifier, self.click_strategies)

    async def resolve_field(
        self, page: Page, identifier: str, field_type: Optional[str] = None
    ) -> Optional[Resolution]:
        """Resolve an input field, preferring input-specific attributes."""
        return await self.resolve(page, identifier, self.field_strategies, field_type)
