"""Cookie header helpers for platform downloads."""
import re
from typing import Any, List, Mapping, Optional


def build_cookie_header(cookies: Any) -> Optional[str]:
    """
    Normalize caller-supplied cookies to a single Cookie header value.

    Accepts a raw header string, a list of ``{"name": ..., "value": ...}``
    items (dicts or objects with those attributes), or a name -> value mapping.
    Returns None when nothing usable was supplied.
    """
    if not cookies:
        return None

    if isinstance(cookies, str):
        return cookies.strip() or None

    if isinstance(cookies, Mapping):
        parts = [
            f"{name}={'' if value is None else value}"
            for name, value in cookies.items()
            if name
        ]
        return "; ".join(parts) or None

    if isinstance(cookies, (list, tuple)):
        parts = []
        for item in cookies:
            if isinstance(item, Mapping):
                name, value = item.get("name"), item.get("value")
            else:
                name, value = getattr(item, "name", None), getattr(item, "value", None)
            if name:
                parts.append(f"{name}={'' if value is None else value}")
        return "; ".join(parts) or None

    return None


def cookie_names(cookie_header: Optional[str]) -> List[str]:
    """List the cookie names in a header value, for diagnostics."""
    if not cookie_header:
        return []
    names = []
    for part in re.split(r';\s*', cookie_header):
        name = part.split('=', 1)[0].strip()
        if name:
            names.append(name)
    return names
