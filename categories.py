from typing import Dict, Iterable, List


DEFAULT_CATEGORIES = {
    "work": "#3b82f6",
    "study": "#10b981",
    "personal": "#8b5cf6",
    "meeting": "#f59e0b",
    "break": "#6b7280",
}

FALLBACK_COLOR = "#6b7280"


def normalize_category_name(raw) -> str:
    return " ".join(str(raw or "").split()).lower()


def _custom_pairs(custom_categories: Iterable):
    for cat in custom_categories or []:
        if isinstance(cat, dict):
            yield cat.get("name"), cat.get("color")
        else:
            yield getattr(cat, "name", None), getattr(cat, "color", None)


def resolve_category_color(category, custom_categories: Iterable = ()) -> str:
    """Display color for a category key; unknown keys get the fallback gray."""
    key = normalize_category_name(category)
    if key in DEFAULT_CATEGORIES:
        return DEFAULT_CATEGORIES[key]
    for name, color in _custom_pairs(custom_categories):
        if normalize_category_name(name) == key and color:
            return color
    return FALLBACK_COLOR


def all_categories(custom_categories: Iterable = ()) -> List[Dict]:
    """Defaults first, then the user's custom categories."""
    merged = [
        {"name": name, "color": color, "isDefault": True}
        for name, color in DEFAULT_CATEGORIES.items()
    ]
    for name, color in _custom_pairs(custom_categories):
        merged.append({"name": name, "color": color, "isDefault": False})
    return merged


def is_reserved_category(name) -> bool:
    return normalize_category_name(name) in DEFAULT_CATEGORIES
