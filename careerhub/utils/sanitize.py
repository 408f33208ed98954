"""
Input sanitisation helpers used by exports and the security self-checks.
"""

import re
from typing import Iterable

from bs4 import BeautifulSoup
from markupsafe import escape


DANGEROUS_TAGS = ["script", "style", "iframe", "object", "embed", "frame", "frameset", "base", "meta", "link"]
URL_ATTRIBUTES = ("href", "src", "action", "formaction", "xlink:href", "background", "poster")
BLOCKED_PROTOCOLS = ("javascript:", "data:", "vbscript:", "file:")

# Control characters and whitespace browsers ignore inside a URL scheme
_SCHEME_NOISE = re.compile(r'[\x00-\x20\x7f]+')


def _is_dangerous_url(value: str) -> bool:
    normalized = _SCHEME_NOISE.sub('', value or '').lower()
    return normalized.startswith(BLOCKED_PROTOCOLS)


def sanitize_html(html: str) -> str:
    """
    Remove executable content from an HTML fragment.

    Drops script-like tags entirely, strips ``on*`` event handler attributes
    and removes URL attributes that use a blocked protocol. Formatting tags
    and text are preserved.
    """
    if not html:
        return ''

    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(DANGEROUS_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            attr_lower = attr.lower()
            if attr_lower.startswith("on"):
                del tag.attrs[attr]
            elif attr_lower in URL_ATTRIBUTES and _is_dangerous_url(str(tag.attrs[attr])):
                del tag.attrs[attr]
            elif attr_lower == "style" and "expression(" in str(tag.attrs[attr]).lower():
                del tag.attrs[attr]

    return str(soup)


def has_executable_content(html: str) -> bool:
    """Whether an HTML fragment still contains script, handlers or dangerous URLs."""
    soup = BeautifulSoup(html or '', "html.parser")
    if soup.find(DANGEROUS_TAGS):
        return True
    for tag in soup.find_all(True):
        for attr, value in tag.attrs.items():
            if attr.lower().startswith("on"):
                return True
            if attr.lower() in URL_ATTRIBUTES and _is_dangerous_url(str(value)):
                return True
    return False


def escape_text(text: str) -> str:
    """Escape HTML special characters to entities."""
    if text is None:
        return ''
    return str(escape(str(text)))


def sanitize_url(url: str) -> str:
    """
    Return the URL unchanged if its protocol is safe, otherwise an empty string.

    ``javascript:``, ``data:``, ``vbscript:`` and ``file:`` URLs are blocked.
    """
    if not url:
        return ''
    candidate = url.strip()
    if _is_dangerous_url(candidate):
        return ''
    return candidate


def strip_html(html: str) -> str:
    """Remove all HTML, returning plain text only."""
    if not html:
        return ''
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(DANGEROUS_TAGS):
        tag.decompose()
    text = soup.get_text()
    # Entities like &lt; decode back into angle brackets
    return text.replace('<', '').replace('>', '')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Make a user supplied filename safe to write to disk.

    Path separators become underscores, parent-directory sequences are
    removed and anything outside ``[A-Za-z0-9._-]`` is replaced.
    """
    if not filename:
        return 'untitled'
    name = re.sub(r'[\\/]+', '_', filename)
    name = re.sub(r'\.{2,}', '', name)
    name = re.sub(r'[^A-Za-z0-9._-]', '_', name)
    name = name.strip('._')
    return name[:max_length] or 'untitled'


def contains_any(text: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring check for any of ``needles``."""
    lowered = (text or '').lower()
    return any(n.lower() in lowered for n in needles)
