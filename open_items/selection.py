"""Selection normalization: cache keys and per-application inclusion tests."""

from typing import FrozenSet, Iterable, Optional, Tuple

# Key for the empty selection. Real keys are built from printable app names, so
# no caller-supplied selection can produce it.
ALL_SELECTION_KEY = "\x00all"

SELECTION_KEY_SEPARATOR = "|"

# Short name -> full application name (both lower-cased)
APP_ALIASES = {
    "chrome": "google chrome",
    "brave": "brave browser",
    "vs code": "visual studio code",
}


def normalize_app_name(name: Optional[str]) -> str:
    """Trim and lower-case an application name ("" for None)."""
    return str(name or "").strip().lower()


def normalize_selection(selection: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """
    Normalize a caller-supplied selection.

    Args:
        selection: Application names as given, or None for "all"

    Returns:
        Sorted tuple of normalized, non-empty names (empty tuple means "all")
    """
    if not selection:
        return ()
    if isinstance(selection, str):
        selection = [selection]
    names = {normalize_app_name(name) for name in selection}
    names.discard("")
    return tuple(sorted(names))


def build_selection_key(selection: Optional[Iterable[str]]) -> str:
    """
    Build the canonical cache key for a selection.

    Aliases are deliberately not applied here: ["chrome"] and ["google chrome"]
    produce different keys even though they include the same adapters.

    Examples:
        build_selection_key(["Safari", " chrome "]) -> "chrome|safari"
        build_selection_key([]) -> ALL_SELECTION_KEY
    """
    names = normalize_selection(selection)
    if not names:
        return ALL_SELECTION_KEY
    return SELECTION_KEY_SEPARATOR.join(names)


def canonical_app_name(name: Optional[str]) -> str:
    """Normalize a name and resolve it through the alias table."""
    normalized = normalize_app_name(name)
    return APP_ALIASES.get(normalized, normalized)


def app_identities(name: Optional[str]) -> FrozenSet[str]:
    """
    Every normalized spelling that refers to the same application.

    Examples:
        app_identities("Google Chrome") -> {"google chrome", "chrome"}
        app_identities("Chrome") -> {"google chrome", "chrome"}
    """
    canonical = canonical_app_name(name)
    if not canonical:
        return frozenset()
    aliases = {short for short, full in APP_ALIASES.items() if full == canonical}
    return frozenset({canonical, normalize_app_name(name)} | aliases)


def same_app(first: Optional[str], second: Optional[str]) -> bool:
    """True if two application labels name the same application (alias-aware)."""
    canonical = canonical_app_name(first)
    return bool(canonical) and canonical == canonical_app_name(second)


def is_app_selected(app_name: Optional[str], selection: Optional[Iterable[str]]) -> bool:
    """
    Decide whether an application is included by a selection.

    An empty selection includes every application; otherwise the app is
    included when it, or one of its aliases, is named in the selection.
    """
    names = normalize_selection(selection)
    if not names:
        return True
    canonical = canonical_app_name(app_name)
    if not canonical:
        return False
    return canonical in {canonical_app_name(name) for name in names}
