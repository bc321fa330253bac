"""
Module action menu for the viewer's index view.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.modules.models import Module
from portal.features.modules.urls import edit_url, navigate_url

RESOURCES: Dict[str, str] = {
    "EditContent": "Edit Content",
    "EditTemplates": "Edit Templates",
}


def localize_string(key: str) -> str:
    """Display text for a resource key; the key itself when there is none."""
    return RESOURCES.get(key, key)


class ModuleActionType(str, Enum):
    ADD_CONTENT = "AddContent"
    EDIT_CONTENT = "EditContent"
    MODULE_SETTINGS = "ModuleSettings"


@dataclass
class ModuleAction:
    key: str
    title: str
    action_type: ModuleActionType
    url: str
    secure: SecurityAccessLevel = SecurityAccessLevel.EDIT
    visible: bool = True
    new_window: bool = False
    icon: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action_type"] = self.action_type.value
        data["secure"] = self.secure.name
        return data


def get_index_actions(
    module: Module,
    content_type_id: Optional[str],
    manager_module: Optional[Module],
    can_edit_manager: bool,
    localize: Callable[[str], str] = localize_string,
) -> List[ModuleAction]:
    """
    Actions offered on the module's index view.

    "EditContent" needs a content type on the module; "EditTemplates" links to
    the Templates tab of the content manager module when one exists and the
    caller may edit it.
    """
    actions: List[ModuleAction] = []

    if content_type_id:
        actions.append(
            ModuleAction(
                key="EditContent",
                title=localize("EditContent"),
                action_type=ModuleActionType.ADD_CONTENT,
                url=edit_url(module, "Edit"),
            )
        )

    if manager_module is not None and can_edit_manager:
        actions.append(
            ModuleAction(
                key="EditTemplates",
                title=localize("EditTemplates"),
                action_type=ModuleActionType.ADD_CONTENT,
                url=navigate_url(manager_module.tab_id, "", "tab=Templates"),
            )
        )

    return actions
