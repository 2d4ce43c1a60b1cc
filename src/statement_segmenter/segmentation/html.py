"""HTML extraction: tables as tab-joined rows plus markup-free prose."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True)
class HtmlExtraction:
    prose: str
    tables: List[str] = field(default_factory=list)

    @property
    def full_text(self) -> str:
        return f"{self.prose} {' '.join(self.tables)}".strip()


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_html(html: str) -> HtmlExtraction:
    """Pull every ``<table>`` out of *html* and flatten the remaining markup."""

    soup = BeautifulSoup(html, "lxml")
    for element in soup.find_all(["script", "style"]):
        element.decompose()

    tables: List[str] = []
    for table in soup.find_all("table"):
        rows: List[str] = []
        for row in table.find_all("tr"):
            cells = [_collapse(cell.get_text(" ")) for cell in row.find_all(["th", "td"])]
            if cells:
                rows.append("\t".join(cells))
        table_text = "\n".join(rows).strip()
        if table_text:
            tables.append(table_text)

    # Nested tables go away together with their outermost parent.
    table = soup.find("table")
    while table is not None:
        table.decompose()
        table = soup.find("table")

    prose = _collapse(soup.get_text(" "))
    return HtmlExtraction(prose=prose, tables=tables)
