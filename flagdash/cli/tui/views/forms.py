"""Create/edit forms for flags, configs, AI configs and webhooks."""

from __future__ import annotations

import curses

from flagdash.cli.models import (
    CreateAiConfigRequest,
    CreateConfigRequest,
    CreateFlagRequest,
    CreateWebhookRequest,
    ManagedAiConfig,
    ManagedConfig,
    ManagedFlag,
    UpdateAiConfigRequest,
    UpdateConfigRequest,
    UpdateFlagRequest,
    UpdateWebhookRequest,
    WebhookEndpoint,
)
from flagdash.cli.tui.actions import (
    Action,
    Back,
    SubmitAiConfigCreate,
    SubmitAiConfigUpdate,
    SubmitConfigCreate,
    SubmitConfigUpdate,
    SubmitFlagCreate,
    SubmitFlagUpdate,
    SubmitWebhookCreate,
    SubmitWebhookUpdate,
)
from flagdash.cli.tui.types import KEY_CTRL_S, KEY_ENTER_CODES, KEY_ESCAPE, KEY_TAB
from flagdash.cli.tui.views.base import BaseView
from flagdash.cli.tui.widgets.input_field import InputField
from flagdash.cli.tui.widgets.text_area import TextArea

FLAG_TYPES = ("boolean", "string", "number", "json")
CONFIG_TYPES = ("string", "number", "boolean", "json")
AI_CONFIG_TYPES = ("skill", "rule", "agent")

NEXT_FIELD_KEYS = (KEY_TAB, curses.KEY_DOWN)
PREV_FIELD_KEYS = (curses.KEY_BTAB, curses.KEY_UP)


def _optional(text: str) -> str | None:
    text = text.strip()
    return text or None


class KeyedResourceForm(BaseView):
    """Key, name, description and a type chooser.

    The key and the type are fixed once the resource exists.
    """

    TITLE = ""
    TYPES: tuple[str, ...] = ()

    def __init__(self, project_id: str, edit_key: str | None = None):
        self.project_id = project_id
        self.edit_key = edit_key
        self.key = InputField("Key", edit_key or "", placeholder="my-resource-key", read_only=edit_key is not None)
        self.name = InputField("Name")
        self.description = InputField("Description")
        self.type_index = 0
        self.focus = 1 if edit_key is not None else 0

    @property
    def is_edit(self) -> bool:
        return self.edit_key is not None

    @property
    def type_name(self) -> str:
        return self.TYPES[self.type_index]

    def _set_type(self, type_name: str) -> None:
        if type_name in self.TYPES:
            self.type_index = self.TYPES.index(type_name)

    def _fields(self) -> list[InputField]:
        return [self.key, self.name, self.description]

    def is_valid(self) -> bool:
        return bool(self.key.value.strip() and self.name.value.strip())

    def _submit(self) -> Action:
        raise NotImplementedError

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE:
            return Back()
        if key in NEXT_FIELD_KEYS:
            self.focus = (self.focus + 1) % 4
            return None
        if key in PREV_FIELD_KEYS:
            self.focus = (self.focus - 1) % 4
            return None
        if self.focus == 3:
            if key in (curses.KEY_LEFT, curses.KEY_RIGHT) and not self.is_edit:
                step = 1 if key == curses.KEY_RIGHT else -1
                self.type_index = (self.type_index + step) % len(self.TYPES)
            elif key in KEY_ENTER_CODES and self.is_valid():
                return self._submit()
            return None
        if key in KEY_ENTER_CODES:
            self.focus += 1
            return None
        self._fields()[self.focus].handle_key(key)
        return None

    def get_hints(self) -> str:
        return "Tab/↑/↓ move · ←/→ type · Enter on type submits · Esc cancel"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        title = f"Edit {self.TITLE} '{self.edit_key}'" if self.is_edit else f"New {self.TITLE}"
        lines = [title, ""]
        for i, field in enumerate(self._fields()):
            lines.append(field.render_line(self.focus == i))
        marker = ">" if self.focus == 3 else " "
        choices = " ".join(f"[{t}]" if i == self.type_index else f" {t} " for i, t in enumerate(self.TYPES))
        fixed = " (read-only)" if self.is_edit else ""
        lines.append(f"{marker} Type: {choices}{fixed}")
        if not self.is_valid():
            lines += ["", "Key and name are required"]
        return [line[:width] for line in lines]


class FlagFormView(KeyedResourceForm):
    TITLE = "flag"
    TYPES = FLAG_TYPES

    @classmethod
    def for_create(cls, project_id: str) -> "FlagFormView":
        return cls(project_id)

    @classmethod
    def for_edit(cls, project_id: str, flag: ManagedFlag) -> "FlagFormView":
        form = cls(project_id, edit_key=flag.key)
        form.name.set_value(flag.name)
        form.description.set_value(flag.description or "")
        form._set_type(flag.flag_type)
        return form

    def _submit(self) -> Action:
        if self.edit_key is not None:
            return SubmitFlagUpdate(self.edit_key)
        return SubmitFlagCreate()

    def create_request(self) -> CreateFlagRequest:
        return CreateFlagRequest(
            project_id=self.project_id,
            key=self.key.value.strip(),
            name=self.name.value.strip(),
            flag_type=self.type_name,
            description=_optional(self.description.value),
        )

    def update_request(self) -> UpdateFlagRequest:
        return UpdateFlagRequest(name=self.name.value.strip(), description=self.description.value.strip())


class ConfigFormView(KeyedResourceForm):
    TITLE = "config"
    TYPES = CONFIG_TYPES

    @classmethod
    def for_create(cls, project_id: str) -> "ConfigFormView":
        return cls(project_id)

    @classmethod
    def for_edit(cls, project_id: str, config: ManagedConfig) -> "ConfigFormView":
        form = cls(project_id, edit_key=config.key)
        form.name.set_value(config.name)
        form.description.set_value(config.description or "")
        form._set_type(config.config_type)
        return form

    def _submit(self) -> Action:
        if self.edit_key is not None:
            return SubmitConfigUpdate(self.edit_key)
        return SubmitConfigCreate()

    def create_request(self) -> CreateConfigRequest:
        return CreateConfigRequest(
            project_id=self.project_id,
            key=self.key.value.strip(),
            name=self.name.value.strip(),
            config_type=self.type_name,
            description=_optional(self.description.value),
        )

    def update_request(self) -> UpdateConfigRequest:
        return UpdateConfigRequest(name=self.name.value.strip(), description=self.description.value.strip())


class AiConfigFormView(BaseView):
    """File name, folder, type and a content editor; Ctrl+S saves."""

    CONTENT_FOCUS = 3

    def __init__(self, project_id: str, environment_id: str, edit_name: str | None = None):
        self.project_id = project_id
        self.environment_id = environment_id
        self.edit_name = edit_name
        self.file_name = InputField("File name", edit_name or "", placeholder="CLAUDE.md", read_only=edit_name is not None)
        self.folder = InputField("Folder")
        self.type_index = 0
        self.content = TextArea("Content")
        self.focus = 1 if edit_name is not None else 0

    @classmethod
    def for_create(cls, project_id: str, environment_id: str) -> "AiConfigFormView":
        return cls(project_id, environment_id)

    @classmethod
    def for_edit(cls, project_id: str, environment_id: str, ai_config: ManagedAiConfig) -> "AiConfigFormView":
        form = cls(project_id, environment_id, edit_name=ai_config.file_name)
        form.folder.set_value(ai_config.folder or "")
        if ai_config.file_type in AI_CONFIG_TYPES:
            form.type_index = AI_CONFIG_TYPES.index(ai_config.file_type)
        form.content.set_content(ai_config.content)
        return form

    @property
    def is_edit(self) -> bool:
        return self.edit_name is not None

    def is_valid(self) -> bool:
        return bool(self.file_name.value.strip())

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_CTRL_S:
            if not self.is_valid():
                return None
            if self.edit_name is not None:
                return SubmitAiConfigUpdate(self.edit_name)
            return SubmitAiConfigCreate()
        if key == KEY_ESCAPE:
            if self.focus == self.CONTENT_FOCUS:
                self.focus = 0
                return None
            return Back()
        if self.focus == self.CONTENT_FOCUS:
            self.content.handle_key(key)
            return None
        if key in NEXT_FIELD_KEYS or key in KEY_ENTER_CODES:
            self.focus += 1
            return None
        if key in PREV_FIELD_KEYS:
            self.focus = max(0, self.focus - 1)
            return None
        if self.focus == 2:
            if key in (curses.KEY_LEFT, curses.KEY_RIGHT) and not self.is_edit:
                step = 1 if key == curses.KEY_RIGHT else -1
                self.type_index = (self.type_index + step) % len(AI_CONFIG_TYPES)
            return None
        (self.file_name, self.folder)[self.focus].handle_key(key)
        return None

    def create_request(self) -> CreateAiConfigRequest:
        return CreateAiConfigRequest(
            project_id=self.project_id,
            environment_id=self.environment_id,
            file_name=self.file_name.value.strip(),
            file_type=AI_CONFIG_TYPES[self.type_index],
            content=self.content.content(),
            folder=_optional(self.folder.value),
        )

    def update_request(self) -> UpdateAiConfigRequest:
        return UpdateAiConfigRequest(content=self.content.content(), folder=self.folder.value.strip())

    def get_hints(self) -> str:
        if self.focus == self.CONTENT_FOCUS:
            return "Ctrl+S save · Esc back to fields"
        return "Tab/↑/↓ move · ←/→ type · Ctrl+S save · Esc cancel"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        title = f"Edit AI config '{self.edit_name}'" if self.is_edit else "New AI config"
        lines = [title, "", self.file_name.render_line(self.focus == 0), self.folder.render_line(self.focus == 1)]
        marker = ">" if self.focus == 2 else " "
        choices = " ".join(f"[{t}]" if i == self.type_index else f" {t} " for i, t in enumerate(AI_CONFIG_TYPES))
        lines.append(f"{marker} Type: {choices}")
        marker = ">" if self.focus == self.CONTENT_FOCUS else " "
        lines += ["", f"{marker} Content:"]
        lines += self.content.render_lines(width, max(1, height - len(lines)), self.focus == self.CONTENT_FOCUS)
        return [line[:width] for line in lines]


class WebhookFormView(BaseView):
    """URL, description and comma-separated event types."""

    FIELD_COUNT = 3

    def __init__(self, project_id: str, environment_id: str, edit_id: str | None = None):
        self.project_id = project_id
        self.environment_id = environment_id
        self.edit_id = edit_id
        self.url = InputField("URL", placeholder="https://example.com/hooks/flagdash")
        self.description = InputField("Description")
        self.events = InputField("Events", placeholder="flag.updated, config.updated")
        self.focus = 0

    @classmethod
    def for_create(cls, project_id: str, environment_id: str) -> "WebhookFormView":
        return cls(project_id, environment_id)

    @classmethod
    def for_edit(cls, project_id: str, environment_id: str, webhook: WebhookEndpoint) -> "WebhookFormView":
        form = cls(project_id, environment_id, edit_id=webhook.id)
        form.url.set_value(webhook.url)
        form.description.set_value(webhook.description or "")
        form.events.set_value(", ".join(webhook.event_types))
        return form

    def _fields(self) -> list[InputField]:
        return [self.url, self.description, self.events]

    def event_types(self) -> list[str]:
        return [part.strip() for part in self.events.value.split(",") if part.strip()]

    def is_valid(self) -> bool:
        return bool(self.url.value.strip())

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE:
            return Back()
        if key in NEXT_FIELD_KEYS:
            self.focus = (self.focus + 1) % self.FIELD_COUNT
            return None
        if key in PREV_FIELD_KEYS:
            self.focus = (self.focus - 1) % self.FIELD_COUNT
            return None
        if key in KEY_ENTER_CODES:
            if not self.is_valid():
                return None
            if self.edit_id is not None:
                return SubmitWebhookUpdate(self.edit_id)
            return SubmitWebhookCreate()
        self._fields()[self.focus].handle_key(key)
        return None

    def create_request(self) -> CreateWebhookRequest:
        return CreateWebhookRequest(
            project_id=self.project_id,
            environment_id=self.environment_id,
            url=self.url.value.strip(),
            event_types=self.event_types(),
            description=_optional(self.description.value),
        )

    def update_request(self) -> UpdateWebhookRequest:
        return UpdateWebhookRequest(
            url=self.url.value.strip(),
            description=self.description.value.strip(),
            event_types=self.event_types(),
        )

    def get_hints(self) -> str:
        return "Tab/↑/↓ move · Enter save · Esc cancel"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        title = "Edit webhook" if self.edit_id is not None else "New webhook"
        lines = [title, ""]
        for i, field in enumerate(self._fields()):
            lines.append(field.render_line(self.focus == i))
        lines += ["", "Events are comma separated"]
        if not self.is_valid():
            lines.append("URL is required")
        return [line[:width] for line in lines]
