# HTML content extraction and normalization to Markdown.
# Adapters select the main region of a page, then normalize it to text.

import re
from typing import Optional, Sequence

from bs4 import BeautifulSoup, Tag
from trafilatura import extract

NOISE_TAGS = ("script", "style", "nav", "header", "footer", "noscript")

# Below this many characters the trafilatura output is treated as a miss
MIN_MARKDOWN_CHARS = 40


def strip_noise(soup: BeautifulSoup) -> BeautifulSoup:
    for tag in soup.find_all(NOISE_TAGS):
        tag.decompose()
    return soup


def select_main_region(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[Tag]:
    """First element matching the selectors, tried in priority order."""
    for selector in selectors:
        node = soup.select_one(selector)
        if node is not None:
            return node
    return None


def extract_main_content(html: str, selectors: Sequence[str] = ()) -> str:
    """Strip navigation/script/style regions and keep the main content region.

    Falls back to the whole document when no selector matches.
    """
    soup = strip_noise(BeautifulSoup(html, "html.parser"))
    node = select_main_region(soup, selectors)
    if node is not None:
        return node.decode_contents().strip()
    body = soup.body
    if body is not None:
        return body.decode_contents().strip()
    return str(soup).strip()


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    text = soup.get_text("\n")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.splitlines()]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment or page to Markdown."""
    if not html.strip():
        return ""
    md = extract(
        html,
        output_format="markdown",
        include_links=True,
        include_tables=True,
        include_comments=False,
        favor_recall=True,
    )
    if not md or len(md.strip()) < MIN_MARKDOWN_CHARS:
        return html_to_text(html)
    return md.strip()


def extract_title(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    if soup.title and soup.title.string:
        return re.sub(r"\s+", " ", soup.title.string).strip() or None
    return None


def extract_meta_description(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    meta = soup.find("meta", attrs={"name": re.compile(r"^description$", re.I)})
    if meta and meta.get("content"):
        return meta["content"].strip() or None
    return None
