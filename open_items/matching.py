"""Finding a previously seen item again in freshly fetched data."""

from typing import Iterable, Optional
from urllib.parse import urlsplit, urlunsplit

from .cache.models import UnifiedRecord
from .selection import same_app
from .utils import validate_positive_int


def _strip_trailing_slash(text: str) -> str:
    if len(text) > 1 and text.endswith("/"):
        return text[:-1]
    return text


def normalize_url(url: Optional[str]) -> str:
    """
    Normalize a URL for comparison.

    Parsable URLs get a lower-cased scheme and host and lose a single
    trailing slash; anything else only loses the trailing slash.

    Examples:
        normalize_url("https://X.com/") -> "https://x.com"
        normalize_url("https://x.com") -> "https://x.com"
        normalize_url("not a url/") -> "not a url"
    """
    if not url:
        return ""
    trimmed = str(url).strip()
    if not trimmed:
        return ""
    try:
        parts = urlsplit(trimmed)
    except ValueError:
        return _strip_trailing_slash(trimmed)
    if not parts.scheme or not (parts.netloc or parts.path):
        return _strip_trailing_slash(trimmed)
    normalized = urlunsplit((
        parts.scheme.lower(),
        parts.netloc.lower(),
        parts.path or ("/" if parts.netloc else ""),
        parts.query,
        parts.fragment,
    ))
    return _strip_trailing_slash(normalized)


def find_matching_record(
    target: UnifiedRecord,
    candidates: Iterable[UnifiedRecord],
) -> Optional[UnifiedRecord]:
    """
    Find the fresh record that best matches a previously seen one.

    Only records of the same application (or one of its aliases) are
    considered. Criteria are tried in order and the first one that matches
    anything decides; within a criterion the first candidate wins:

    1. normalized URL equality
    2. exact title equality
    3. case-insensitive title equality
    4. equal (window_index, tab_index)

    Returns:
        The matching record or None
    """
    if target is None:
        return None
    pool = [record for record in candidates if same_app(target.source_label, record.source_label)]
    if not pool:
        return None

    if target.url:
        target_url = normalize_url(target.url)
        for record in pool:
            if record.url and normalize_url(record.url) == target_url:
                return record

    if target.title:
        for record in pool:
            if record.title == target.title:
                return record
        target_title = target.title.casefold()
        for record in pool:
            if (record.title or "").casefold() == target_title:
                return record

    window_index = validate_positive_int(target.window_index)
    tab_index = validate_positive_int(target.tab_index)
    if window_index is not None and tab_index is not None:
        for record in pool:
            if record.window_index == window_index and record.tab_index == tab_index:
                return record

    return None
