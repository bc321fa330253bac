"""
URL helpers for module pages.
"""
from urllib.parse import urlencode

from .models import Module


def view_url(module: Module) -> str:
    return f"/modules/{module.id}"


def edit_url(module: Module, control_key: str = "Edit") -> str:
    """URL of one of the module's controls (e.g. its edit form)."""
    return f"{view_url(module)}/{control_key.lower()}"


def navigate_url(tab_id: int, *params: str) -> str:
    """
    URL of a portal page.

    Extra params are "key=value" strings appended as the query string.
    """
    query = []
    for param in params:
        if not param:
            continue
        key, _, value = param.partition("=")
        query.append((key, value))
    url = f"/tabs/{tab_id}"
    if query:
        url += "?" + urlencode(query)
    return url
