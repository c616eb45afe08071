"""Text normalization helpers shared by the platform clients."""
import re
from typing import List

HASHTAG_PATTERN = re.compile(r'#(\w+)')
MENTION_PATTERN = re.compile(r'@([\w.]+)')

HTML_ENTITIES = [
    ('&#39;', "'"),
    ('&quot;', '"'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&amp;', '&'),
]


def extract_hashtags(text: str) -> List[str]:
    """Return hashtags in order of appearance, without the leading '#'."""
    if not text:
        return []
    return HASHTAG_PATTERN.findall(text)


def extract_mentions(text: str) -> List[str]:
    """Return mentioned handles in order of appearance, without the leading '@'."""
    if not text:
        return []
    return MENTION_PATTERN.findall(text)


def clean_text(text: str) -> str:
    """Unescape the common HTML entities and trim whitespace."""
    if not text:
        return ""
    # &amp; last so "&amp;quot;" stays "&quot;"
    for entity, replacement in HTML_ENTITIES:
        text = text.replace(entity, replacement)
    return text.strip()


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split()) if text else 0
