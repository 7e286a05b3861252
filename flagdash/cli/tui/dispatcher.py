"""Background work: loaders, mutations and the device-login flow.

Every piece of work runs as a fire-and-forget asyncio task. Tasks never touch
`AppState`; they receive plain values at spawn time and report back by putting
actions on the shared queue.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import platform
import webbrowser
from functools import partial
from typing import Awaitable, Callable, Coroutine, TypeVar

from flagdash.cli.api_client import APIError, FlagDashAPIClient
from flagdash.cli.models import (
    DeviceAuthResponse,
    DeviceTokenResponse,
    JsonValue,
    ManagedAiConfig,
    ManagedConfig,
    ManagedFlag,
    WebhookEndpoint,
)
from flagdash.cli.tui.actions import (
    Action,
    ApiError,
    DashboardData,
    DashboardFlag,
    DashboardLoaded,
    DeliveriesLoaded,
    DeviceAuthReceived,
    DeviceTokenPollFailed,
    DeviceTokenPollResult,
    SetLoading,
    Toast,
    WebhookLoaded,
)
from flagdash.cli.tui.types import NotificationLevel

logger = logging.getLogger(__name__)

T = TypeVar("T")
Send = Callable[[Action], None]
Sleep = Callable[[float], Awaitable[None]]

RECENT_FLAGS_LIMIT = 8
DELIVERIES_LIMIT = 50
MIN_POLL_INTERVAL_S = 2
DEFAULT_DEVICE_NAME = "FlagDash CLI"

# Device-flow error codes that mean "keep polling".
POLL_CONTINUE_CODES = frozenset({"authorization_pending", "slow_down"})
EXPIRED_TOKEN = "expired_token"


def format_json_value(value: JsonValue) -> str:
    """Render a flag value compactly for tables.

    Values wrapped as {"value": x} and single-entry objects are unwrapped.
    """
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, dict):
        if "value" in value:
            return format_json_value(value["value"])
        if len(value) == 1:
            return format_json_value(next(iter(value.values())))
    return json.dumps(value, separators=(",", ":"))


def build_dashboard_data(
    flags: list[ManagedFlag],
    configs: list[ManagedConfig],
    webhooks: list[WebhookEndpoint],
    ai_configs: list[ManagedAiConfig],
) -> DashboardData:
    """Compute the dashboard counts, subtitles and recent-flag rows."""
    active_flags = sum(1 for f in flags if any(e.enabled for e in f.env_data))
    active_configs = sum(1 for c in configs if c.env_values and all(e.is_active for e in c.env_values))
    active_webhooks = sum(1 for w in webhooks if w.is_active)
    ai_env_count = len({a.environment_id for a in ai_configs})

    if not flags:
        flag_subtitle = "no flags"
    else:
        flag_subtitle = f"{active_flags} active"
    if not configs or active_configs == len(configs):
        config_subtitle = "all active"
    else:
        config_subtitle = f"{active_configs} active"
    if webhooks and active_webhooks == len(webhooks):
        webhook_subtitle = "all healthy"
    else:
        webhook_subtitle = f"{active_webhooks} active"

    recent = sorted(flags, key=lambda f: f.updated_at, reverse=True)[:RECENT_FLAGS_LIMIT]
    recent_flags = [
        DashboardFlag(
            key=f.key,
            flag_type=f.flag_type,
            rollout=f.env_data[0].rollout_percentage if f.env_data else None,
            value=format_json_value(f.default_value),
            enabled=any(e.enabled for e in f.env_data),
            updated_at=f.updated_at,
        )
        for f in recent
    ]
    return DashboardData(
        flag_count=len(flags),
        config_count=len(configs),
        webhook_count=len(webhooks),
        ai_config_count=len(ai_configs),
        flag_subtitle=flag_subtitle,
        config_subtitle=config_subtitle,
        ai_config_subtitle=f"{ai_env_count} env",
        webhook_subtitle=webhook_subtitle,
        recent_flags=recent_flags,
    )


def device_name() -> str:
    """Label shown to the user when approving a device login."""
    return os.environ.get("HOSTNAME") or os.environ.get("COMPUTERNAME") or platform.node() or DEFAULT_DEVICE_NAME


def open_browser(url: str) -> None:
    try:
        if not webbrowser.open(url):
            logger.warning("No browser available to open %s", url)
    except webbrowser.Error as e:
        logger.warning("Failed to open browser for %s: %s", url, e)


async def poll_device_token_loop(
    client: FlagDashAPIClient,
    device_code: str,
    interval: int,
    expires_in: int,
    send: Send,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """Poll the token endpoint until a terminal outcome.

    At most `expires_in // interval` polls are made, each preceded by a sleep
    of the advertised interval (never less than 2 s). A token or any error
    code other than pending/slow_down ends the loop after being reported; a
    transport failure ends it with DeviceTokenPollFailed. Exhausting the budget reports
    a synthesized `expired_token` result.

    Args:
        client: Unauthenticated API client
        device_code: Code issued by the device-auth request
        interval: Server-advertised polling interval in seconds
        expires_in: Lifetime of the device code in seconds
        send: Puts an action on the queue
        sleep: Awaitable sleep (replaced in tests)
    """
    max_polls = expires_in // max(interval, 1)
    delay = max(interval, MIN_POLL_INTERVAL_S)
    for attempt in range(1, max_polls + 1):
        await sleep(delay)
        try:
            response = await client.poll_device_token(device_code)
        except APIError as e:
            logger.error("Device token poll %d failed: %s", attempt, e)
            send(DeviceTokenPollFailed(f"Poll error: {e}"))
            return
        if response.session_token:
            send(DeviceTokenPollResult(response))
            return
        if response.error is None or response.error in POLL_CONTINUE_CODES:
            logger.debug("Device token poll %d: %s", attempt, response.error or "no result yet")
            continue
        send(DeviceTokenPollResult(response))
        return
    logger.info("Device code expired after %d polls", max_polls)
    send(DeviceTokenPollResult(DeviceTokenResponse(error=EXPIRED_TOKEN)))


class Dispatcher:
    """Launches background tasks that report through the action queue."""

    def __init__(self, queue: asyncio.Queue[Action], sleep: Sleep = asyncio.sleep):
        self.queue = queue
        self.sleep = sleep
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def send(self, action: Action) -> None:
        self.queue.put_nowait(action)

    def spawn(self, coro: Coroutine[object, object, None], name: str) -> asyncio.Task[None]:
        """Run a coroutine in the background, keeping a strong reference until it ends."""
        task = asyncio.get_running_loop().create_task(self._guard(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, coro: Coroutine[object, object, None], name: str) -> None:
        try:
            await coro
        except APIError as e:
            logger.error("Task %s failed: %s", name, e)
            self.send(ApiError(str(e)))
        except Exception as e:  # noqa: BLE001 - task boundary
            logger.error("Task %s crashed", name, exc_info=True)
            self.send(ApiError(f"Unexpected error: {e}"))

    async def join(self) -> None:
        """Wait for every task spawned so far (and any they spawn)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Cancelled %d background tasks", len(tasks))

    # --- Generic shapes ---

    def load(self, name: str, call: Callable[[], Awaitable[T]], wrap: Callable[[T], Action]) -> None:
        """Fetch something and deliver it wrapped in a loaded action."""

        async def run() -> None:
            self.send(wrap(await call()))

        self.spawn(run(), name)

    def mutate(
        self,
        name: str,
        call: Callable[[], Awaitable[T]],
        wrap: Callable[[T], Action],
        success_message: str,
    ) -> None:
        """Run a mutation, then deliver its result action and a success toast."""

        async def run() -> None:
            result = await call()
            logger.info("%s succeeded", name)
            self.send(wrap(result))
            self.send(Toast(success_message, NotificationLevel.SUCCESS))

        self.spawn(run(), name)

    # --- Composite loaders ---

    def load_dashboard(self, api: FlagDashAPIClient, project_id: str, environment_id: str) -> None:
        """Aggregate the four resource lists; a failed list counts as empty."""

        async def best_effort(call: Callable[[], Awaitable[list[T]]], what: str) -> list[T]:
            try:
                return await call()
            except APIError as e:
                logger.warning("Dashboard %s unavailable: %s", what, e)
                return []

        async def run() -> None:
            if not project_id:
                self.send(ApiError("No project selected"))
                self.send(SetLoading(False))
                return
            flags = await best_effort(partial(api.list_flags, project_id), "flags")
            configs = await best_effort(partial(api.list_configs, project_id), "configs")
            webhooks = await best_effort(partial(api.list_webhooks, project_id), "webhooks")
            ai_configs = await best_effort(partial(api.list_ai_configs, project_id, environment_id), "AI configs")
            self.send(DashboardLoaded(build_dashboard_data(flags, configs, webhooks, ai_configs)))
            self.send(SetLoading(False))

        self.spawn(run(), "load_dashboard")

    def load_webhook(self, api: FlagDashAPIClient, webhook_id: str) -> None:
        """Load a webhook, then its recent deliveries (sent only on success)."""

        async def run() -> None:
            try:
                self.send(WebhookLoaded(await api.get_webhook(webhook_id)))
            except APIError as e:
                logger.error("Task load_webhook failed: %s", e)
                self.send(ApiError(str(e)))
            try:
                deliveries = await api.list_webhook_deliveries(webhook_id, limit=DELIVERIES_LIMIT)
            except APIError as e:
                logger.warning("Deliveries for webhook %s unavailable: %s", webhook_id, e)
                return
            self.send(DeliveriesLoaded(webhook_id, deliveries))

        self.spawn(run(), "load_webhook")

    # --- Device login ---

    def request_login(self, base_url: str) -> None:
        """Phase 1: ask for a device code on an unauthenticated client."""

        async def run() -> None:
            client = FlagDashAPIClient(base_url)
            try:
                device_auth = await client.request_device_auth(device_name())
            except APIError as e:
                logger.error("Device login request failed: %s", e)
                self.send(ApiError(f"Failed to start login: {e}"))
                return
            finally:
                await client.close()
            self.send(DeviceAuthReceived(device_auth))

        self.spawn(run(), "request_device_auth")

    def start_polling(self, base_url: str, device_auth: DeviceAuthResponse) -> asyncio.Task[None]:
        """Phase 2: open the browser and poll for the token in the background."""
        open_browser(device_auth.verification_url)

        async def run() -> None:
            client = FlagDashAPIClient(base_url)
            try:
                await poll_device_token_loop(
                    client,
                    device_auth.device_code,
                    device_auth.interval,
                    device_auth.expires_in,
                    self.send,
                    sleep=self.sleep,
                )
            finally:
                await client.close()

        return self.spawn(run(), "poll_device_token")
