"""View identity and the static navigation tables."""

from __future__ import annotations

from dataclasses import dataclass

from flagdash.cli.tui.types import SidebarSection, ViewKind


@dataclass(frozen=True)
class View:
    """The active screen, optionally parameterized by a resource key."""

    kind: ViewKind
    key: str | None = None

    def __post_init__(self) -> None:
        keyed = self.kind in KEYED_KINDS
        if keyed and not self.key:
            raise ValueError(f"{self.kind.value} requires a resource key")
        if not keyed and self.key is not None:
            raise ValueError(f"{self.kind.value} takes no resource key")

    def __str__(self) -> str:
        return f"{self.kind.value}({self.key})" if self.key else self.kind.value


KEYED_KINDS = frozenset(
    {
        ViewKind.FLAG_DETAIL,
        ViewKind.FLAG_EDIT,
        ViewKind.FLAG_TOGGLE,
        ViewKind.FLAG_ROLLOUT,
        ViewKind.FLAG_RULES,
        ViewKind.FLAG_VARIATIONS,
        ViewKind.FLAG_SCHEDULES,
        ViewKind.CONFIG_DETAIL,
        ViewKind.CONFIG_EDIT,
        ViewKind.CONFIG_VALUE_EDITOR,
        ViewKind.AI_CONFIG_DETAIL,
        ViewKind.AI_CONFIG_EDIT,
        ViewKind.WEBHOOK_DETAIL,
        ViewKind.WEBHOOK_EDIT,
    }
)

# Views where quit / switcher / picker / logout bindings apply.
MAIN_KINDS = frozenset(
    {
        ViewKind.DASHBOARD,
        ViewKind.FLAG_LIST,
        ViewKind.FLAG_DETAIL,
        ViewKind.CONFIG_LIST,
        ViewKind.CONFIG_DETAIL,
        ViewKind.AI_CONFIG_LIST,
        ViewKind.AI_CONFIG_DETAIL,
        ViewKind.WEBHOOK_LIST,
        ViewKind.WEBHOOK_DETAIL,
        ViewKind.ENVIRONMENT_LIST,
    }
)

# Main views whose unhandled keys fall through to the section tabs.
SECTION_FALLBACK_KINDS = frozenset(
    {
        ViewKind.DASHBOARD,
        ViewKind.FLAG_LIST,
        ViewKind.CONFIG_LIST,
        ViewKind.AI_CONFIG_LIST,
        ViewKind.WEBHOOK_LIST,
        ViewKind.ENVIRONMENT_LIST,
    }
)

FLAG_SUBEDITOR_KINDS = frozenset(
    {
        ViewKind.FLAG_TOGGLE,
        ViewKind.FLAG_ROLLOUT,
        ViewKind.FLAG_RULES,
        ViewKind.FLAG_VARIATIONS,
        ViewKind.FLAG_SCHEDULES,
    }
)

DASHBOARD = View(ViewKind.DASHBOARD)
LOGIN = View(ViewKind.LOGIN)
PROJECT_PICKER = View(ViewKind.PROJECT_PICKER)
FLAG_LIST = View(ViewKind.FLAG_LIST)
CONFIG_LIST = View(ViewKind.CONFIG_LIST)
AI_CONFIG_LIST = View(ViewKind.AI_CONFIG_LIST)
WEBHOOK_LIST = View(ViewKind.WEBHOOK_LIST)
ENVIRONMENT_LIST = View(ViewKind.ENVIRONMENT_LIST)

# Parent of every view kind; keyed parents reuse the child's key.
_BACK_TABLE: dict[ViewKind, ViewKind] = {
    ViewKind.LOGIN: ViewKind.DASHBOARD,
    ViewKind.PROJECT_PICKER: ViewKind.DASHBOARD,
    ViewKind.DASHBOARD: ViewKind.DASHBOARD,
    ViewKind.FLAG_LIST: ViewKind.DASHBOARD,
    ViewKind.FLAG_DETAIL: ViewKind.FLAG_LIST,
    ViewKind.FLAG_CREATE: ViewKind.FLAG_LIST,
    ViewKind.FLAG_EDIT: ViewKind.FLAG_LIST,
    ViewKind.FLAG_TOGGLE: ViewKind.FLAG_DETAIL,
    ViewKind.FLAG_ROLLOUT: ViewKind.FLAG_DETAIL,
    ViewKind.FLAG_RULES: ViewKind.FLAG_DETAIL,
    ViewKind.FLAG_VARIATIONS: ViewKind.FLAG_DETAIL,
    ViewKind.FLAG_SCHEDULES: ViewKind.FLAG_DETAIL,
    ViewKind.CONFIG_LIST: ViewKind.DASHBOARD,
    ViewKind.CONFIG_DETAIL: ViewKind.CONFIG_LIST,
    ViewKind.CONFIG_CREATE: ViewKind.CONFIG_LIST,
    ViewKind.CONFIG_EDIT: ViewKind.CONFIG_LIST,
    ViewKind.CONFIG_VALUE_EDITOR: ViewKind.CONFIG_DETAIL,
    ViewKind.AI_CONFIG_LIST: ViewKind.DASHBOARD,
    ViewKind.AI_CONFIG_DETAIL: ViewKind.AI_CONFIG_LIST,
    ViewKind.AI_CONFIG_CREATE: ViewKind.AI_CONFIG_LIST,
    ViewKind.AI_CONFIG_EDIT: ViewKind.AI_CONFIG_LIST,
    ViewKind.WEBHOOK_LIST: ViewKind.DASHBOARD,
    ViewKind.WEBHOOK_DETAIL: ViewKind.WEBHOOK_LIST,
    ViewKind.WEBHOOK_CREATE: ViewKind.WEBHOOK_LIST,
    ViewKind.WEBHOOK_EDIT: ViewKind.WEBHOOK_LIST,
    ViewKind.ENVIRONMENT_LIST: ViewKind.DASHBOARD,
}

_SECTION_VIEWS: dict[SidebarSection, View] = {
    SidebarSection.DASHBOARD: DASHBOARD,
    SidebarSection.FLAGS: FLAG_LIST,
    SidebarSection.CONFIGS: CONFIG_LIST,
    SidebarSection.AI_CONFIGS: AI_CONFIG_LIST,
    SidebarSection.WEBHOOKS: WEBHOOK_LIST,
    SidebarSection.ENVIRONMENTS: ENVIRONMENT_LIST,
}


def back_target(view: View) -> View:
    """Return the logical parent of a view.

    Args:
        view: Current view

    Returns:
        Parent view; keyed parents inherit the child's key
    """
    parent = _BACK_TABLE[view.kind]
    if parent in KEYED_KINDS:
        return View(parent, view.key)
    return View(parent)


def section_view(section: SidebarSection) -> View:
    """Map a section tab to its landing view."""
    return _SECTION_VIEWS[section]


def section_for_view(view: View) -> SidebarSection | None:
    """Return the section tab that owns a view, if any."""
    kind = view.kind
    while kind not in (ViewKind.DASHBOARD, ViewKind.LOGIN, ViewKind.PROJECT_PICKER):
        for section, landing in _SECTION_VIEWS.items():
            if landing.kind is kind:
                return section
        kind = _BACK_TABLE[kind]
    return SidebarSection.DASHBOARD if kind is ViewKind.DASHBOARD else None
