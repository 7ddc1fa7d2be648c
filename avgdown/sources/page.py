"""Broker page source.

Extracts holding and position data from a saved Robinhood page using
BeautifulSoup. Selectors mirror the markup of the stock detail page and
the portfolio sidebar.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup

from avgdown.sources.base import BaseSource, read_text

logger = logging.getLogger(__name__)

POSITION_CELL_SELECTOR = 'div[data-testid="PositionCell"]'
TICKER_SELECTOR = "span.css-1ezzyzy"
SHARES_SELECTOR = "span.css-14ulni3"

_LEADING_NUMBER = re.compile(r"\s*(-?(?:\d+(?:\.\d*)?|\.\d+))")
_SHARES_RUN = re.compile(r"[\d,]+")
_PERCENT_TEXT = re.compile(r"^[+\-−][\d,]+\.\d+%$")


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse the leading number of a string, or None if there is none."""
    if not text:
        return None
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    return float(match.group(1))


def parse_currency(text: Optional[str]) -> Optional[float]:
    """Parse a currency string such as ``"$1,234.56"``."""
    if not text:
        return None
    return parse_number(text.replace("$", "").replace(",", ""))


class PageSource(BaseSource):
    """Source backed by the HTML of a broker page."""

    def __init__(self, html: str, origin: str = "<page>"):
        """Initialize the page source.

        Args:
            html: Page markup.
            origin: Description of where the markup came from, for messages.
        """
        self.origin = origin
        self._soup = BeautifulSoup(html, "html.parser")

    @classmethod
    def from_file(cls, path: Path) -> "PageSource":
        """Create a source from a saved HTML file."""
        return cls(read_text(path), origin=str(path))

    def _find_current_price(self) -> Optional[float]:
        for span in self._soup.select("span[aria-label]"):
            label = span.get("aria-label", "")
            if label.startswith("$"):
                price = parse_currency(label)
                if price and price > 0:
                    return price
        return None

    def _find_average_cost(self) -> Optional[float]:
        for div in self._soup.select("div.caption-text"):
            if "average cost" in div.get_text().strip().lower():
                heading = div.find_next_sibling()
                if heading is not None and heading.name == "h2":
                    return parse_currency(heading.get_text())
        return None

    def _find_share_count(self) -> Optional[float]:
        for row in self._soup.select("tbody tr"):
            cells = row.find_all("td")
            if len(cells) < 3:
                continue
            if cells[0].get_text().strip().lower() == "shares":
                digits = re.sub(r"[^\d.]", "", cells[2].get_text().strip())
                return parse_number(digits)
        return None

    def get_holding_data(self) -> dict:
        """Get holding data from a stock detail page."""
        data = {
            "current_price": self._find_current_price(),
            "average_cost": self._find_average_cost(),
            "share_count": self._find_share_count(),
        }
        logger.debug("Extracted holding from %s: %s", self.origin, data)
        return data

    def _parse_cell(self, cell) -> Optional[dict]:
        ticker_elem = cell.select_one(TICKER_SELECTOR)
        if ticker_elem is None:
            return None
        ticker = ticker_elem.get_text().strip()

        shares = 0.0
        shares_elem = cell.select_one(SHARES_SELECTOR)
        if shares_elem is not None:
            match = _SHARES_RUN.search(shares_elem.get_text().strip())
            if match:
                shares = float(match.group(0).replace(",", ""))

        percent_change = None
        for span in cell.find_all("span"):
            text = span.get_text().strip()
            if _PERCENT_TEXT.match(text):
                percent_change = text.replace("+", "").replace("%", "")
                break

        if not ticker or percent_change is None:
            return None

        return {
            "ticker": ticker,
            "share_count": shares,
            "percent_change": percent_change,
        }

    def get_positions_data(self) -> list[dict]:
        """Get position entries from the portfolio sidebar."""
        positions = []

        for cell in self._soup.select(POSITION_CELL_SELECTOR):
            try:
                entry = self._parse_cell(cell)
            except ValueError as e:
                logger.warning("Error parsing position cell in %s: %s", self.origin, e)
                continue
            if entry is not None:
                positions.append(entry)

        logger.debug("Found %d positions in %s", len(positions), self.origin)
        return positions
