# core/picklist_config.py

"""Configuration for the grouped picklist: record extractors and persisted settings."""

import json
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple

SETTINGS_FILE = "picklist_settings.json"

# Group used for records whose group field is missing or empty
UNASSIGNED_GROUP = "Unassigned"
# Group used for every record when no group field is configured
DEFAULT_GROUP = "Default Group"

ID_FIELDS = ("Id", "id")
FALLBACK_LABEL_FIELD = "Name"


def get_default_picklist_settings() -> dict:
    """Get complete default picklist settings structure."""
    return {
        "query": "",
        "group_key_field": None,
        "display_field": None,
    }


def ensure_complete_picklist_settings(settings) -> dict:
    """Ensure settings has all required fields with proper defaults."""
    if not settings or not isinstance(settings, dict):
        return get_default_picklist_settings()

    defaults = get_default_picklist_settings()
    complete_settings = {}

    query = settings.get("query", defaults["query"])
    complete_settings["query"] = query if isinstance(query, str) else defaults["query"]

    # Empty field names mean "not configured"
    for key in ("group_key_field", "display_field"):
        value = settings.get(key, defaults[key])
        if isinstance(value, str) and value.strip():
            complete_settings[key] = value.strip()
        else:
            complete_settings[key] = None

    return complete_settings


def load_picklist_settings(path=None) -> dict:
    """Load settings from a JSON file, falling back to defaults on any problem."""
    settings_path = Path(path) if path else Path.cwd() / SETTINGS_FILE
    if not settings_path.exists():
        return get_default_picklist_settings()

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"[CONFIG] ⚠️ Could not load settings file '{settings_path}': {e}")
        return get_default_picklist_settings()

    return ensure_complete_picklist_settings(data)


def save_picklist_settings(settings: dict, path=None) -> bool:
    """Save settings as JSON. Returns False if the file could not be written."""
    settings_path = Path(path) if path else Path.cwd() / SETTINGS_FILE
    complete = ensure_complete_picklist_settings(settings)
    try:
        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(complete, f, indent=4)
    except OSError as e:
        print(f"[CONFIG] ❌ Could not save settings file '{settings_path}': {e}")
        return False
    print(f"[CONFIG] 💾 Saved picklist settings to {settings_path}")
    return True


def record_id(record: Mapping[str, Any]) -> Optional[str]:
    """Return the record id as a string, or None when the record has no usable id."""
    for field in ID_FIELDS:
        value = record.get(field)
        if value is not None and value != "":
            return str(value)
    return None


class PicklistConfig:
    """
    Tells the grouping engine how to read a record.

    The extractor receives a record and returns ``(group_key, label)``. Build one
    from field names with :meth:`from_fields`, or pass any callable.
    """

    def __init__(self, extractor: Optional[Callable[[Mapping[str, Any]], Tuple[Any, Any]]] = None):
        self.extractor = extractor or _field_extractor(None, None)
        self.group_key_field = None
        self.display_field = None

    @classmethod
    def from_fields(cls, group_key_field: Optional[str] = None, display_field: Optional[str] = None) -> "PicklistConfig":
        config = cls(_field_extractor(group_key_field, display_field))
        config.group_key_field = group_key_field
        config.display_field = display_field
        return config

    @classmethod
    def from_settings(cls, settings: Optional[dict]) -> "PicklistConfig":
        complete = ensure_complete_picklist_settings(settings)
        return cls.from_fields(complete["group_key_field"], complete["display_field"])

    def extract(self, record: Mapping[str, Any], item_id: str) -> Tuple[str, str]:
        """Apply the extractor and normalise its result to non-empty strings."""
        group_key, label = self.extractor(record)
        group_key = UNASSIGNED_GROUP if group_key is None or group_key == "" else str(group_key)
        label = item_id if label is None or label == "" else str(label)
        return group_key, label


def _field_extractor(group_key_field: Optional[str], display_field: Optional[str]):
    """Build an extractor that reads the group and label from named record fields."""

    def extract(record):
        if group_key_field:
            group_key = record.get(group_key_field) or UNASSIGNED_GROUP
        else:
            group_key = DEFAULT_GROUP

        label = None
        if display_field:
            label = record.get(display_field)
        if label is None or label == "":
            label = record.get(FALLBACK_LABEL_FIELD)
        if label is None or label == "":
            label = record_id(record)
        return group_key, label

    return extract
