"""Two-phase project and environment picker."""

from __future__ import annotations

import curses
from enum import Enum

from flagdash.cli.models import Environment, Project
from flagdash.cli.tui.actions import Action, Back, PickerProjectChosen, ProjectSelected, Quit
from flagdash.cli.tui.types import KEY_ENTER_CODES, KEY_ESCAPE
from flagdash.cli.tui.views.base import BaseView


class PickerPhase(str, Enum):
    SELECT_PROJECT = "select_project"
    SELECT_ENVIRONMENT = "select_environment"


class ProjectPickerView(BaseView):
    """Choose a project, then one of its environments."""

    def __init__(self) -> None:
        self.phase = PickerPhase.SELECT_PROJECT
        self.projects: list[Project] = []
        self.environments: list[Environment] = []
        self.selected_project_idx = 0
        self.selected_env_idx = 0
        self.chosen_project_id = ""
        self.saved_project_id = ""
        self.saved_environment_id = ""
        self.loading = True
        self._highlight: int | None = None

    @property
    def has_saved_project(self) -> bool:
        return bool(self.saved_project_id)

    def set_saved_defaults(self, project_id: str, environment_id: str) -> None:
        """Remember the persisted selection and restart at the project phase."""
        self.saved_project_id = project_id
        self.saved_environment_id = environment_id
        self.reset()

    def reset(self) -> None:
        self.phase = PickerPhase.SELECT_PROJECT
        self.projects = []
        self.environments = []
        self.selected_project_idx = 0
        self.selected_env_idx = 0
        self.chosen_project_id = ""
        self.loading = True

    def set_projects(self, projects: list[Project]) -> None:
        self.selected_project_idx = 0
        for i, project in enumerate(projects):
            if project.id == self.saved_project_id:
                self.selected_project_idx = i
                break
        self.projects = projects
        self.loading = False

    def set_environments(self, environments: list[Environment]) -> None:
        """Pre-select the saved environment, else the default one, else the first."""
        index = next((i for i, e in enumerate(environments) if e.id == self.saved_environment_id), None)
        if index is None:
            index = next((i for i, e in enumerate(environments) if e.is_default), 0)
        self.selected_env_idx = index
        self.environments = environments
        self.phase = PickerPhase.SELECT_ENVIRONMENT
        self.loading = False

    def _escape(self) -> Action:
        return Back() if self.has_saved_project else Quit()

    def handle_key(self, key: int) -> Action | None:
        if self.loading:
            return self._escape() if key == KEY_ESCAPE else None
        if self.phase is PickerPhase.SELECT_PROJECT:
            return self._handle_project_key(key)
        return self._handle_environment_key(key)

    def _handle_project_key(self, key: int) -> Action | None:
        if key in (curses.KEY_UP, ord("k")):
            self.selected_project_idx = max(0, self.selected_project_idx - 1)
        elif key in (curses.KEY_DOWN, ord("j")):
            self.selected_project_idx = min(max(0, len(self.projects) - 1), self.selected_project_idx + 1)
        elif key in KEY_ENTER_CODES and self.projects:
            project = self.projects[self.selected_project_idx]
            self.chosen_project_id = project.id
            self.loading = True
            return PickerProjectChosen(project.id)
        elif key == KEY_ESCAPE:
            return self._escape()
        return None

    def _handle_environment_key(self, key: int) -> Action | None:
        if key in (curses.KEY_UP, ord("k")):
            self.selected_env_idx = max(0, self.selected_env_idx - 1)
        elif key in (curses.KEY_DOWN, ord("j")):
            self.selected_env_idx = min(max(0, len(self.environments) - 1), self.selected_env_idx + 1)
        elif key in KEY_ENTER_CODES and self.environments:
            env = self.environments[self.selected_env_idx]
            project = next((p for p in self.projects if p.id == self.chosen_project_id), None)
            return ProjectSelected(
                project_id=self.chosen_project_id,
                environment_id=env.id,
                project_name=project.name if project else "",
                environment_name=env.name,
            )
        elif key == KEY_ESCAPE:
            self.phase = PickerPhase.SELECT_PROJECT
            self.environments = []
            self.selected_env_idx = 0
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        if self.phase is PickerPhase.SELECT_ENVIRONMENT:
            return "↑/↓ select · Enter choose · Esc back to projects"
        return "↑/↓ select · Enter choose · Esc " + ("back" if self.has_saved_project else "quit")

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        if self.phase is PickerPhase.SELECT_PROJECT:
            lines = ["Select a project", ""]
            if self.loading:
                return lines + ["Loading projects..."]
            if not self.projects:
                return lines + ["No projects found. Create one at flagdash.io"]
            for i, project in enumerate(self.projects):
                if i == self.selected_project_idx:
                    self._highlight = len(lines)
                saved = "  (last used)" if project.id == self.saved_project_id else ""
                lines.append(f"  {project.name} [{project.slug}]{saved}"[:width])
            return lines

        lines = ["Select an environment", ""]
        if self.loading:
            return lines + ["Loading environments..."]
        if not self.environments:
            return lines + ["No environments found for this project"]
        for i, env in enumerate(self.environments):
            if i == self.selected_env_idx:
                self._highlight = len(lines)
            default = "  (default)" if env.is_default else ""
            lines.append(f"  {env.name} [{env.slug}]{default}"[:width])
        return lines
