"""Webhook endpoint list and detail (with recent deliveries)."""

from __future__ import annotations

import curses

from flagdash.cli.models import WebhookDelivery, WebhookEndpoint
from flagdash.cli.tui.actions import (
    Action,
    Back,
    DeleteWebhook,
    Navigate,
    ShowConfirm,
    SubmitWebhookReactivate,
    SubmitWebhookSecretRegenerate,
)
from flagdash.cli.tui.navigation import View
from flagdash.cli.tui.types import KEY_BACKSPACE_CODES, KEY_ENTER_CODES, KEY_ESCAPE, ViewKind
from flagdash.cli.tui.views.base import BaseView, SelectableListMixin, cell, format_timestamp
from flagdash.config.schema import KeyTier


def webhook_health(webhook: WebhookEndpoint) -> str:
    if not webhook.is_active:
        return "disabled"
    if webhook.consecutive_failures:
        return f"failing ({webhook.consecutive_failures})"
    return "healthy"


def mask_secret(secret: str | None) -> str:
    if not secret:
        return "-"
    return secret[:6] + "…" if len(secret) > 6 else "…"


class WebhookListView(SelectableListMixin[WebhookEndpoint], BaseView):
    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.webhooks: list[WebhookEndpoint] = []
        self.selected_index = 0
        self.key_tier = key_tier
        self._highlight: int | None = None

    def set_webhooks(self, webhooks: list[WebhookEndpoint]) -> None:
        self.webhooks = webhooks
        self.selected_index = min(self.selected_index, max(0, len(webhooks) - 1))

    def visible_items(self) -> list[WebhookEndpoint]:
        return self.webhooks

    def handle_key(self, key: int) -> Action | None:
        if key in (curses.KEY_DOWN, ord("j")):
            self.move_down()
            return None
        if key in (curses.KEY_UP, ord("k")):
            self.move_up()
            return None
        if key == ord("c") and self.key_tier.can_mutate():
            return Navigate(View(ViewKind.WEBHOOK_CREATE))
        webhook = self.selected_item()
        if webhook is None:
            return None
        if key in KEY_ENTER_CODES:
            return Navigate(View(ViewKind.WEBHOOK_DETAIL, webhook.id))
        if key == ord("d") and self.key_tier.can_mutate():
            return ShowConfirm(DeleteWebhook(webhook.id))
        return None

    def highlighted_line(self) -> int | None:
        return self._highlight

    def get_hints(self) -> str:
        hints = "j/k move · Enter open"
        if self.key_tier.can_mutate():
            hints += " · c create · d delete"
        return hints

    def get_render_lines(self, width: int, height: int) -> list[str]:
        self._highlight = None
        lines = [f"Webhooks ({len(self.webhooks)})", ""]
        if not self.webhooks:
            lines.append("  (no webhook endpoints)")
            return lines
        lines.append(f"  {cell('URL', 40)} {cell('Events', 24)} Status"[:width])
        for i, webhook in enumerate(self.webhooks):
            if i == self.selected_index:
                self._highlight = len(lines)
            events = ", ".join(webhook.event_types) or "-"
            lines.append(f"  {cell(webhook.url, 40)} {cell(events, 24)} {webhook_health(webhook)}"[:width])
        return lines


class WebhookDetailView(BaseView):
    def __init__(self, key_tier: KeyTier = KeyTier.UNKNOWN):
        self.webhook: WebhookEndpoint | None = None
        self.deliveries: list[WebhookDelivery] = []
        self.key_tier = key_tier

    def set_webhook(self, webhook: WebhookEndpoint) -> None:
        if self.webhook is None or self.webhook.id != webhook.id:
            self.deliveries = []
        self.webhook = webhook

    def handle_key(self, key: int) -> Action | None:
        if key == KEY_ESCAPE or key in KEY_BACKSPACE_CODES:
            return Back()
        if self.webhook is None or not self.key_tier.can_mutate():
            return None
        if key == ord("e"):
            return Navigate(View(ViewKind.WEBHOOK_EDIT, self.webhook.id))
        if key == ord("r"):
            return SubmitWebhookSecretRegenerate(self.webhook.id)
        if key == ord("a") and not self.webhook.is_active:
            return SubmitWebhookReactivate(self.webhook.id)
        return None

    def get_hints(self) -> str:
        if self.key_tier.can_mutate():
            return "e edit · r regenerate secret · a reactivate · Esc back"
        return "Esc back"

    def get_render_lines(self, width: int, height: int) -> list[str]:
        webhook = self.webhook
        if webhook is None:
            return ["Webhook", "", "Loading..."]
        lines = [
            f"Webhook: {webhook.url}",
            "",
            f"  ID:          {webhook.id}",
            f"  Description: {webhook.description or '-'}",
            f"  Events:      {', '.join(webhook.event_types) or '-'}",
            f"  Status:      {webhook_health(webhook)}",
            f"  Secret:      {mask_secret(webhook.signing_secret)}",
        ]
        if webhook.disabled_at is not None:
            lines.append(f"  Disabled:    {format_timestamp(webhook.disabled_at)} {webhook.disabled_reason or ''}")
        lines += ["", f"Recent deliveries ({len(self.deliveries)})"]
        if not self.deliveries:
            lines.append("  (none)")
        for delivery in self.deliveries[: max(0, height - len(lines))]:
            lines.append(
                f"  {cell(delivery.event_type, 20)} {cell(delivery.status, 10)} {cell(delivery.http_status, 4)} "
                f"{delivery.attempt_count}/{delivery.max_attempts}  {format_timestamp(delivery.created_at)}"
            )
        return [line[:width] for line in lines]
