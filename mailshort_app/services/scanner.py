"""
HTML document scanner.

Parses an email body with BeautifulSoup's built-in "html.parser", which
recovers from unclosed and malformed tags instead of failing, and records
every attribute that carries a URL we might shorten:

- href on anchor-like elements (<a>, <area>)
- data-href / data-url / data-link on any element

The scanner keeps a reference to each occurrence so the rewrite pass can
mutate exactly those attributes later. Eligibility is decided elsewhere
(see classifier.should_process).
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping

from bs4 import BeautifulSoup
from bs4.element import Tag

from mailshort_app.services.classifier import should_process

ANCHOR_TAGS = ("a", "area")
AUXILIARY_URL_ATTRIBUTES = ("data-href", "data-url", "data-link")


@dataclass
class UrlOccurrence:
    """One attribute on one element whose value is a URL"""
    tag: Tag
    attribute: str
    url: str


class ScannedDocument:
    """A parsed document plus every URL-bearing attribute found in it"""

    def __init__(self, soup: BeautifulSoup, occurrences: List[UrlOccurrence]):
        self.soup = soup
        self.occurrences = occurrences

    def unique_urls(self) -> List[str]:
        """Each distinct URL once, in first-seen order"""
        return list(dict.fromkeys(o.url for o in self.occurrences))

    def candidate_urls(self, short_domain: str) -> List[str]:
        """Distinct URLs that pass the eligibility rules"""
        return [url for url in self.unique_urls() if should_process(url, short_domain)]

    def apply_substitutions(self, table: Mapping[str, str]) -> int:
        """
        Replace every occurrence whose URL has an entry in *table*.

        The table is keyed by URL, so all occurrences of the same URL get the
        same replacement. Occurrences without an entry are left untouched.
        Returns the number of attributes rewritten.
        """
        replaced = 0
        for occurrence in self.occurrences:
            replacement = table.get(occurrence.url)
            if replacement is None:
                continue
            occurrence.tag[occurrence.attribute] = replacement
            replaced += 1
        return replaced

    def render(self) -> str:
        """Serialize the (possibly rewritten) document"""
        return str(self.soup)


def _attribute_value(tag: Tag, attribute: str) -> str:
    value = tag.get(attribute)
    # Multi-valued attributes come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value or "")


def scan_document(html: str) -> ScannedDocument:
    """Parse *html* and collect URL occurrences: anchors first, then data-* attributes."""
    soup = BeautifulSoup(html, "html.parser")
    occurrences: List[UrlOccurrence] = []

    for tag in soup.find_all(list(ANCHOR_TAGS), href=True):
        occurrences.append(UrlOccurrence(tag, "href", _attribute_value(tag, "href")))

    for attribute in AUXILIARY_URL_ATTRIBUTES:
        for tag in soup.find_all(attrs={attribute: True}):
            occurrences.append(
                UrlOccurrence(tag, attribute, _attribute_value(tag, attribute))
            )

    return ScannedDocument(soup, occurrences)


def count_by_attribute(document: ScannedDocument) -> Dict[str, int]:
    """Occurrence counts per attribute name (for logging)"""
    counts: Dict[str, int] = {}
    for occurrence in document.occurrences:
        counts[occurrence.attribute] = counts.get(occurrence.attribute, 0) + 1
    return counts
