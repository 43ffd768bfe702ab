"""Static per-application capability metadata."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import Config
from .selection import canonical_app_name, normalize_selection


@dataclass(frozen=True)
class CapabilityProfile:
    """What an application exposes and how volatile its items are."""
    category: str
    supports_tabs: bool = False
    supports_documents: bool = False
    supports_paths: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


UNIVERSAL_PROFILE = CapabilityProfile(category="universal")

APP_CAPABILITIES: Dict[str, CapabilityProfile] = {
    "Safari": CapabilityProfile("browsers", True, False, True),
    "Google Chrome": CapabilityProfile("browsers", True, False, True),
    "Brave Browser": CapabilityProfile("browsers", True, False, True),
    "Arc": CapabilityProfile("browsers", True, False, True),
    "Comet": CapabilityProfile("browsers", True, False, True),

    "Terminal": CapabilityProfile("terminals", True, False, True),
    "iTerm2": CapabilityProfile("terminals", True, False, True),

    "VS Code": CapabilityProfile("editors", True, True, True),
    "Visual Studio Code": CapabilityProfile("editors", True, True, True),
    "Sublime Text": CapabilityProfile("editors", True, True, True),
    "TextEdit": CapabilityProfile("editors", False, True, True),

    "Pages": CapabilityProfile("productivity", False, True, True),
    "Keynote": CapabilityProfile("productivity", False, True, True),
    "Numbers": CapabilityProfile("productivity", False, True, True),
    "Preview": CapabilityProfile("productivity", True, True, True),

    "Finder": CapabilityProfile("system", True, False, True),
    "System Preferences": CapabilityProfile("system", False, False, False),
    "Activity Monitor": CapabilityProfile("system", False, False, False),
}

# Lower-cased, alias-resolved name -> profile
_CANONICAL_INDEX: Dict[str, CapabilityProfile] = {
    canonical_app_name(name): profile for name, profile in APP_CAPABILITIES.items()
}


def lookup(app_name: Optional[str]) -> CapabilityProfile:
    """
    Look up the capability profile of an application.

    Exact names win; otherwise the name is matched case-insensitively and
    through the alias table. Unknown applications get UNIVERSAL_PROFILE.
    """
    if app_name in APP_CAPABILITIES:
        return APP_CAPABILITIES[app_name]
    return _CANONICAL_INDEX.get(canonical_app_name(app_name), UNIVERSAL_PROFILE)


def supports_tabs(app_name: Optional[str]) -> bool:
    return lookup(app_name).supports_tabs


def supports_documents(app_name: Optional[str]) -> bool:
    return lookup(app_name).supports_documents


def list_known_apps() -> List[Dict[str, Any]]:
    """Known applications with their profiles, for selection pickers."""
    return [{"name": name, **profile.to_dict()} for name, profile in APP_CAPABILITIES.items()]


def ttl_for_selection(selection: Optional[Iterable[str]], config: Config) -> float:
    """
    Cache TTL for a selection.

    The empty selection uses the default TTL. Otherwise the most volatile
    category among the selected apps wins, so mixing a browser with a
    productivity app still refreshes at browser speed.
    """
    names = normalize_selection(selection)
    if not names:
        return config.cache_default_ttl
    return min(config.ttl_for_category(lookup(name).category) for name in names)
