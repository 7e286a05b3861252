"""Per-environment flag sub-editors: toggle, rollout, rules, variations, schedules."""

from __future__ import annotations

import curses
import json

from flagdash.cli.models import Environment, FlagEnvironmentData, JsonValue, ManagedFlag, Schedule, VariationInput
from flagdash.cli.tui.actions import (
    Action,
    Back,
    CancelSchedule,
    DeleteVariations,
    ShowConfirm,
    SubmitFlagToggle,
    SubmitRolloutUpdate,
    SubmitRulesUpdate,
    SubmitVariationsUpdate,
)
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_CTRL_S, KEY_ENTER_CODES, KEY_ESCAPE, KEY_TAB
from flagdash.cli.tui.views.base import BaseView, cell, format_timestamp, wrap_index
from flagdash.cli.tui.widgets.text_area import TextArea
from flagdash.config.schema import KeyTier

ROLLOUT_STEP_COARSE = 5
DEFAULT_RULES = "[]"
DEFAULT_VARIATIONS = "[]"
VARIATIONS_EXAMPLE = '[{"key": "control", "name": "Control", "value": false, "weight": 100}]'


class EnvironmentCursor:
    """Selected environment shared by the per-environment editors."""

    def __init__(self) -> None:
        self.environments: list[Environment] = []
        self.selected_env = 0

    def set_environments(self, environments: list[Environment], preferred_id: str = "") -> None:
        self.environments = environments
        self.selected_env = next((i for i, e in enumerate(environments) if e.id == preferred_id), 0)

    def cycle_environment(self, step: int = 1) -> None:
        self.selected_env = wrap_index(self.selected_env, step, len(self.environments))

    def selected_environment(self) -> Environment | None:
        if not self.environments:
            return None
        return self.environments[min(self.selected_env, len(self.environments) - 1)]

    def selected_environment_id(self) -> str | None:
        env = self.selected_environment()
        return env.id if env else None

    def environment_label(self) -> str:
        env = self.selected_environment()
        if env is None:
            return "Environment: (loading...)"
        return f"Environment: {env.name} [{self.selected_env + 1}/{len(self.environments)}]"


def _env_data(flag: ManagedFlag | None, environment_id: str | None) -> FlagEnvironmentData | None:
    if flag is None or environment_id is None:
        return None
    return next((e for e in flag.env_data if e.environment_id == environment_id), None)


class FlagToggleView(EnvironmentCursor, BaseView):
    """Pick an environment and flip the flag there."""

    def __init__(self, flag_key: str):
        super().__init__()
        self.flag_key = flag_key
        self.flag: ManagedFlag | None = None
        self._highlight: int | None = None

    def is_enabled(self, environment_id: str) -> bool:
        data = _env_data(self.flag, environment_id)
        return bool(data and data.enabled)

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if key in (curses.KEY_DOWN, ord("j")):
            self.cycle_environment(1)
        elif key in (curses.KEY_UP, ord("k")):
            self.cycle_environment(-1)
        elif (key in KEY_ENTER_CODES or key == ord("t")) and self.environments:
            return SubmitFlagToggle(self.flag_key)
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        return "j/k environment · Enter/t toggle · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        lines = [f"Toggle flag: {self.flag_key}", ""]
        if not self.environments:
            return lines + ["Loading environments..."]
        for i, env in enumerate(self.environments):
            if i == self.selected_env:
                self._highlight = len(lines)
            state = "ON " if self.is_enabled(env.id) else "OFF"
            lines.append(f"  {cell(env.name, 24)} {state}"[:width])
        return lines


class FlagRolloutView(EnvironmentCursor, BaseView):
    """Adjust the rollout percentage for one environment."""

    def __init__(self, flag_key: str, flag: ManagedFlag | None = None):
        super().__init__()
        self.flag_key = flag_key
        self.flag = flag
        self.percentage = 0

    def set_environments(self, environments: list[Environment], preferred_id: str = "") -> None:
        super().set_environments(environments, preferred_id)
        self._load_percentage()

    def _load_percentage(self) -> None:
        data = _env_data(self.flag, self.selected_environment_id())
        self.percentage = data.rollout_percentage if data else 0

    def set_percentage(self, value: int) -> None:
        self.percentage = max(0, min(100, value))

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if key == curses.KEY_LEFT:
            self.set_percentage(self.percentage - ROLLOUT_STEP_COARSE)
        elif key == curses.KEY_RIGHT:
            self.set_percentage(self.percentage + ROLLOUT_STEP_COARSE)
        elif key == curses.KEY_DOWN:
            self.set_percentage(self.percentage - 1)
        elif key == curses.KEY_UP:
            self.set_percentage(self.percentage + 1)
        elif key == ord("0"):
            self.set_percentage(0)
        elif key == ord("5"):
            self.set_percentage(50)
        elif key == ord("9"):
            self.set_percentage(100)
        elif key == KEY_TAB:
            self.cycle_environment(1)
            self._load_percentage()
        elif key in KEY_ENTER_CODES and self.environments:
            return SubmitRolloutUpdate(self.flag_key)
        return None

    def get_hints(self) -> str:
        return "←/→ ±5 · ↑/↓ ±1 · 0/5/9 presets · Tab environment · Enter save · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        bar_width = max(10, min(50, width - 12))
        filled = round(bar_width * self.percentage / 100)
        return [
            f"Rollout: {self.flag_key}",
            "",
            self.environment_label(),
            "",
            f"  [{'█' * filled}{'░' * (bar_width - filled)}] {self.percentage:>3}%"[:width],
        ]


class FlagRulesView(EnvironmentCursor, BaseView):
    """JSON editor for one environment's targeting rules."""

    def __init__(self, flag_key: str, flag: ManagedFlag | None = None):
        super().__init__()
        self.flag_key = flag_key
        self.flag = flag
        self.editor = TextArea("Rules", DEFAULT_RULES)

    def set_environments(self, environments: list[Environment], preferred_id: str = "") -> None:
        super().set_environments(environments, preferred_id)
        self._load_rules()

    def _load_rules(self) -> None:
        data = _env_data(self.flag, self.selected_environment_id())
        if data is not None and data.rules is not None:
            self.editor.set_content(json.dumps(data.rules, indent=2))
        else:
            self.editor.set_content(DEFAULT_RULES)

    def parse_rules(self) -> JsonValue:
        """Parse the editor buffer.

        Raises:
            ValueError: If the buffer is not valid JSON
        """
        return json.loads(self.editor.content())

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE:
            return Back()
        if key == KEY_CTRL_S:
            return SubmitRulesUpdate(self.flag_key)
        if key == curses.KEY_BTAB:
            self.cycle_environment(1)
            self._load_rules()
            return None
        self.editor.handle_key(key)
        return None

    def get_hints(self) -> str:
        return "Ctrl+S save · Shift+Tab environment · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        lines = [f"Rules: {self.flag_key}", self.environment_label(), ""]
        lines += self.editor.render_lines(width, max(1, height - len(lines)))
        return [line[:width] for line in lines]


def parse_variations(text: str) -> list[VariationInput]:
    """Parse a JSON array of {key, name, value, weight} objects.

    Raises:
        ValueError: If the text is not valid JSON or an entry is malformed
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of variations")
    variations = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"variation {i} is not an object")
        missing = [name for name in ("key", "name", "weight") if name not in item]
        if missing:
            raise ValueError(f"variation {i} is missing {', '.join(missing)}")
        if not isinstance(item["weight"], int):
            raise ValueError(f"variation {i} weight must be an integer")
        variations.append(
            VariationInput(key=str(item["key"]), name=str(item["name"]), value=item.get("value"), weight=item["weight"])
        )
    return variations


class FlagVariationsView(BaseView):
    """Draft of a replacement variation set, typed as JSON.

    The API has no read endpoint for variations, so the draft starts empty.
    Press `e` to edit the JSON and Esc to return to the preview. Ctrl+S only
    submits once the draft has been edited.
    """

    def __init__(self, flag_key: str, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.flag_key = flag_key
        self.key_tier = key_tier
        self.editor = TextArea("Variations", DEFAULT_VARIATIONS)
        self.editing = False
        self.edited = False
        self.selected = 0
        self._highlight: int | None = None

    def parse_variations(self) -> list[VariationInput]:
        return parse_variations(self.editor.content())

    def _preview(self) -> list[VariationInput]:
        try:
            return self.parse_variations()
        except ValueError:
            return []

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_CTRL_S:
            return SubmitVariationsUpdate(self.flag_key) if self.edited else None
        if self.editing:
            if key == KEY_ESCAPE:
                self.editing = False
            else:
                before = self.editor.content()
                self.editor.handle_key(key)
                self.edited = self.edited or self.editor.content() != before
            return None
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if key == ord("e"):
            self.editing = True
        elif key in (curses.KEY_DOWN, ord("j")):
            self.selected = wrap_index(self.selected, 1, len(self._preview()))
        elif key in (curses.KEY_UP, ord("k")):
            self.selected = wrap_index(self.selected, -1, len(self._preview()))
        elif key == ord("d") and self.key_tier.can_mutate():
            return ShowConfirm(DeleteVariations(self.flag_key))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        if self.editing:
            return "Ctrl+S save · Esc preview"
        return "e edit JSON · j/k move · d delete all · Ctrl+S save · Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        lines = [f"Draft variations: {self.flag_key}", ""]
        if self.editing:
            lines += self.editor.render_lines(width, max(1, height - len(lines)))
            return [line[:width] for line in lines]
        try:
            variations = self.parse_variations()
        except ValueError as e:
            return lines + [f"  Invalid JSON: {e}"[:width], "", "  Press e to fix it"]
        if not variations:
            return lines + [
                "  Nothing drafted. Saving replaces all of the flag's variations.",
                "",
                f"  Press e and type a JSON array, e.g. {VARIATIONS_EXAMPLE}"[:width],
            ]
        lines.append(f"  {cell('Key', 20)} {cell('Name', 20)} {cell('Value', 16)} Weight"[:width])
        total = 0
        for i, variation in enumerate(variations):
            if i == self.selected:
                self._highlight = len(lines)
            total += variation.weight
            lines.append(
                f"  {cell(variation.key, 20)} {cell(variation.name, 20)} "
                f"{cell(json.dumps(variation.value), 16)} {variation.weight}"[:width]
            )
        lines += ["", f"  Total weight: {total}"]
        return lines


class FlagSchedulesView(BaseView):
    """Scheduled changes for the flag in the current environment."""

    def __init__(self, flag_key: str, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.flag_key = flag_key
        self.key_tier = key_tier
        self.schedules: list[Schedule] = []
        self.loading = True
        self.selected = 0
        self._highlight: int | None = None

    def set_schedules(self, schedules: list[Schedule]) -> None:
        self.schedules = schedules
        self.loading = False
        self.selected = min(self.selected, max(0, len(schedules) - 1))

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if key in (curses.KEY_DOWN, ord("j")):
            self.selected = wrap_index(self.selected, 1, len(self.schedules))
        elif key in (curses.KEY_UP, ord("k")):
            self.selected = wrap_index(self.selected, -1, len(self.schedules))
        elif key == ord("x") and self.schedules and self.key_tier.can_mutate():
            schedule = self.schedules[self.selected]
            return ShowConfirm(CancelSchedule(flag_key=self.flag_key, schedule_id=schedule.id))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        hints = "j/k move · Esc back"
        if self.key_tier.can_mutate():
            hints = "x cancel schedule · " + hints
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        lines = [f"Schedules: {self.flag_key}", ""]
        if self.loading:
            return lines + ["Loading schedules..."]
        if not self.schedules:
            return lines + ["  (no scheduled changes)"]
        lines.append(f"  {cell('Action', 12)} {cell('Scheduled', 17)} {cell('Status', 10)} Executed"[:width])
        for i, schedule in enumerate(self.schedules):
            if i == self.selected:
                self._highlight = len(lines)
            line = (
                f"  {cell(schedule.action, 12)} {cell(format_timestamp(schedule.scheduled_at), 17)} "
                f"{cell(schedule.status, 10)} {format_timestamp(schedule.executed_at)}"
            )
            if schedule.error_message:
                line += f"  {schedule.error_message}"
            lines.append(line[:width])
        return lines
