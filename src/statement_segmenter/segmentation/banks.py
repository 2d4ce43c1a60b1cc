"""Institution detection by substring matching."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

LOGGER = logging.getLogger(__name__)

UNKNOWN_BANK = "Unknown"

# Order is the tie-break: the first listed name found in the text wins, so
# a name that also shows up inside a longer institution name (for example
# "Citizens Bank" in "First Citizens Bank") is listed after that institution.
DEFAULT_BANK_NAMES: Tuple[str, ...] = (
    "JPMorgan Chase",
    "Chase",
    "Bank of America",
    "Wells Fargo",
    "Citibank",
    "First Citizens",
    "Citizens Bank",
    "U.S. Bank",
    "PNC Bank",
    "Truist",
    "Capital One",
    "TD Bank",
    "Fifth Third Bank",
    "KeyBank",
    "Huntington",
    "Regions Bank",
    "M&T Bank",
    "Santander",
    "BMO",
    "HSBC",
    "Barclays",
    "Goldman Sachs",
    "Morgan Stanley",
    "Charles Schwab",
    "American Express",
    "Ally Bank",
    "Navy Federal",
    "USAA",
    "Silicon Valley Bank",
    "First Republic",
    "Mercury",
    "Brex",
    "BBVA",
    "Banorte",
    "Scotiabank",
    "RBC",
    "CIBC",
    "Discover Bank",
)


class BankDetector:
    """Return the first known institution name mentioned in a text."""

    def __init__(self, names: Iterable[str] = DEFAULT_BANK_NAMES) -> None:
        self.names: Tuple[str, ...] = tuple(name for name in names if name and name.strip())
        self._needles: List[Tuple[str, str]] = [(name, name.lower()) for name in self.names]

    def detect(self, text: str) -> str:
        haystack = (text or "").lower()
        for name, needle in self._needles:
            if needle in haystack:
                return name
        return UNKNOWN_BANK

    @classmethod
    def from_file(cls, path: str | Path) -> "BankDetector":
        """Load an ordered, newline-separated name list; ``#`` starts a comment."""
        names: List[str] = []
        for line in Path(path).read_text(encoding="utf-8").splitlines():
            entry = line.split("#", 1)[0].strip()
            if entry:
                names.append(entry)
        LOGGER.info("Loaded %s institution names from %s", len(names), path)
        return cls(names)
