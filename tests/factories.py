"""Builders for API models, a mock API client and a ready-to-use app state."""

# type: ignore - test helpers build frozen dataclasses with partial data

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

from flagdash.cli.api_client import FlagDashAPIClient
from flagdash.cli.models import (
    ConfigEnvironmentValue,
    DeviceAuthResponse,
    Environment,
    FlagEnvironmentData,
    ManagedAiConfig,
    ManagedConfig,
    ManagedFlag,
    Project,
    Schedule,
    WebhookDelivery,
    WebhookEndpoint,
)
from flagdash.cli.tui.controller import AppController
from flagdash.cli.tui.dispatcher import Dispatcher
from flagdash.cli.tui.state import AppState
from flagdash.config import AppConfig, ConfigStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_flag(key="new-checkout", *, enabled=(True,), rollout=100, rules=None, updated_at=NOW, default_value=True):
    envs = [
        FlagEnvironmentData(
            id=f"fe-{i}",
            environment_id=f"env-{i + 1}",
            enabled=on,
            rules=rules,
            rollout_percentage=rollout,
        )
        for i, on in enumerate(enabled)
    ]
    return ManagedFlag(
        id=f"flag-{key}",
        key=key,
        name=key.replace("-", " ").title(),
        flag_type="boolean",
        created_at=NOW,
        updated_at=updated_at,
        default_value=default_value,
        environments=envs,
    )


def make_config(key="theme", *, values=(("env-1", {"color": "blue"}, True),), default_value=None):
    return ManagedConfig(
        id=f"cfg-{key}",
        key=key,
        name=key.title(),
        config_type="json",
        created_at=NOW,
        updated_at=NOW,
        default_value=default_value,
        environments=[
            ConfigEnvironmentValue(id=f"cv-{i}", environment_id=env_id, value=value, is_active=active)
            for i, (env_id, value, active) in enumerate(values)
        ],
    )


def make_ai_config(file_name="CLAUDE.md", *, environment_id="env-1", content="# Rules\nBe terse.\n"):
    return ManagedAiConfig(
        id=f"ai-{file_name}",
        file_name=file_name,
        file_type="rule",
        content=content,
        created_at=NOW,
        updated_at=NOW,
        project_id="proj-1",
        environment_id=environment_id,
        is_active=True,
    )


def make_webhook(webhook_id="wh-1", *, is_active=True, failures=0, secret="whsec_0123456789abcdef"):
    return WebhookEndpoint(
        id=webhook_id,
        url=f"https://example.com/hooks/{webhook_id}",
        environment_id="env-1",
        event_types=["flag.updated"],
        is_active=is_active,
        created_at=NOW,
        updated_at=NOW,
        consecutive_failures=failures,
        signing_secret=secret,
    )


def make_delivery(delivery_id="dl-1", *, status="success", http_status=200):
    return WebhookDelivery(
        id=delivery_id,
        event_type="flag.updated",
        status=status,
        http_status=http_status,
        attempt_count=1,
        max_attempts=3,
        created_at=NOW,
    )


def make_environment(env_id="env-1", name="Production", *, is_default=False):
    return Environment(id=env_id, name=name, slug=name.lower(), created_at=NOW, is_default=is_default)


def make_project(project_id="proj-1", name="Acme"):
    return Project(id=project_id, name=name, slug=name.lower(), created_at=NOW)


def make_schedule(schedule_id="sch-1", *, status="pending"):
    return Schedule(
        id=schedule_id,
        action="enable",
        scheduled_at=NOW + timedelta(days=1),
        status=status,
        created_at=NOW,
    )


def make_device_auth(*, interval=5, expires_in=30):
    return DeviceAuthResponse(
        device_code="dev-code",
        user_code="ABCD-EFGH",
        verification_url="https://flagdash.io/device?code=ABCD-EFGH",
        expires_in=expires_in,
        interval=interval,
    )


def MockAPIClient():  # noqa: N802 - reads like a class at call sites
    """API client double whose async methods are AsyncMocks."""
    api = MagicMock(spec=FlagDashAPIClient)
    api.list_projects.return_value = [make_project()]
    api.list_environments.return_value = [make_environment(), make_environment("env-2", "Staging")]
    api.list_flags.return_value = [make_flag()]
    api.get_flag.side_effect = lambda key, project_id: make_flag(key)
    api.list_configs.return_value = [make_config()]
    api.get_config.side_effect = lambda key, project_id: make_config(key)
    api.list_ai_configs.return_value = [make_ai_config()]
    api.get_ai_config.side_effect = lambda name, project_id, environment_id: make_ai_config(name)
    api.list_webhooks.return_value = [make_webhook()]
    api.get_webhook.side_effect = lambda webhook_id: make_webhook(webhook_id)
    api.list_webhook_deliveries.return_value = [make_delivery()]
    api.list_schedules.return_value = [make_schedule()]
    return api


def make_state(tmp_path: Path, *, token="session_abc", role="owner", project_id="proj-1", environment_id="env-1"):
    config = AppConfig()
    config.auth.session_token = token
    config.auth.user_role = role
    config.defaults.project_id = project_id
    config.defaults.environment_id = environment_id
    config.defaults.project_name = "Acme" if project_id else ""
    config.defaults.environment_name = "Production" if environment_id else ""
    return AppState(config=config, config_store=ConfigStore(tmp_path / "config.yml"))


def make_controller(state: AppState, api=None, sleep=None) -> AppController:
    """Controller on a fresh queue; must be created inside a running loop."""
    queue = asyncio.Queue()
    dispatcher = Dispatcher(queue, sleep=sleep) if sleep else Dispatcher(queue)
    controller = AppController(state, dispatcher)
    if api is not None:
        state.api = api
        state.set_connected(True)
        state.set_key_tier(state.config.user_role_tier())
    return controller


async def settle(controller: AppController) -> list:
    """Run background work to completion, applying every action it produces."""
    applied = []
    queue = controller.dispatcher.queue
    while True:
        await controller.dispatcher.join()
        if queue.empty():
            return applied
        while not queue.empty():
            action = queue.get_nowait()
            applied.append(action)
            controller.apply(action)
