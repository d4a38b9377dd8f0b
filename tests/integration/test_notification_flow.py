"""Integration tests for notification delivery over real HTTP.

A local aiohttp server stands in for the chat webhook and the push API, so
these tests exercise the client session, the provider payloads, the
cooldown records and the dispatcher together.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from aiohttp import test_utils, web

from sizechecker.__main__ import notify
from sizechecker.config import build_config
from sizechecker.core.cooldown import record_path
from sizechecker.core.dispatcher import DispatchOutcome
from sizechecker.plugins import build_notifiers
from sizechecker.plugins.pushover import API_TOKEN_ENV, USER_KEY_ENV
from sizechecker.plugins.pushover.provider import PushoverProvider
from sizechecker.utils.http_client import AIOHTTPClient

MESSAGE = "Warning: Only 1.00GB available in /srv/data, which is below the limit of 10.00GB."


@dataclass
class Recorder:
    webhook_posts: list[dict[str, object]] = field(default_factory=list)
    push_posts: list[dict[str, str]] = field(default_factory=list)
    webhook_status: int = 204


@pytest.fixture
async def fake_services() -> AsyncIterator[tuple[test_utils.TestServer, Recorder]]:
    recorder = Recorder()

    async def webhook(request: web.Request) -> web.Response:
        recorder.webhook_posts.append(await request.json())
        if recorder.webhook_status != 204:
            return web.json_response({"message": "Unknown Webhook", "code": 10015}, status=recorder.webhook_status)
        return web.Response(status=204)

    async def messages(request: web.Request) -> web.Response:
        form = await request.post()
        recorder.push_posts.append({key: str(value) for key, value in form.items()})
        return web.json_response({"status": 1, "request": "integration"})

    app = web.Application()
    _ = app.router.add_post("/api/webhooks/{webhook_id}/{token}", webhook)
    _ = app.router.add_post("/1/messages.json", messages)

    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server, recorder
    finally:
        await server.close()


async def test_both_providers_deliver_and_start_cooldowns(
    fake_services: tuple[test_utils.TestServer, Recorder],
    state_dir: Path,
    tmp_path: Path,
) -> None:
    server, recorder = fake_services
    webhook_url = str(server.make_url("/api/webhooks/42/integration-token"))
    config = build_config(
        path=tmp_path,
        limit="10GB",
        runtype="a",
        discord=webhook_url,
        pushover="nas-box",
    ).model_copy(update={"state_dir": state_dir})

    http_client = AIOHTTPClient()
    notifiers = build_notifiers(config, http_client)
    notifiers[1] = PushoverProvider(
        target="nas-box",
        http_client=http_client,
        environ={API_TOKEN_ENV: "tok", USER_KEY_ENV: "usr"},
        api_url=str(server.make_url("/1/messages.json")),
    )

    outcomes = await notify(config, MESSAGE, http_client=http_client, notifiers=notifiers)

    assert outcomes == (DispatchOutcome.SENT, DispatchOutcome.SENT)
    assert recorder.webhook_posts == [{"content": MESSAGE, "allowed_mentions": {"parse": []}}]
    assert recorder.push_posts == [{"token": "tok", "user": "usr", "message": MESSAGE, "title": "nas-box"}]
    assert record_path(webhook_url, state_dir).read_text().isdigit()
    assert record_path("nas-box", state_dir).read_text().isdigit()


async def test_rejected_webhook_leaves_cooldown_open(
    fake_services: tuple[test_utils.TestServer, Recorder],
    state_dir: Path,
    tmp_path: Path,
) -> None:
    server, recorder = fake_services
    recorder.webhook_status = 404
    webhook_url = str(server.make_url("/api/webhooks/7/revoked-token"))
    config = build_config(path=tmp_path, limit="10GB", runtype="a", discord=webhook_url).model_copy(
        update={"state_dir": state_dir}
    )
    http_client = AIOHTTPClient()
    notifiers = build_notifiers(config, http_client)

    first = await notify(config, MESSAGE, http_client=http_client, notifiers=notifiers)
    recorder.webhook_status = 204
    second = await notify(config, MESSAGE, http_client=http_client, notifiers=notifiers)

    assert first == (DispatchOutcome.FAILED,)
    assert second == (DispatchOutcome.SENT,)
    assert len(recorder.webhook_posts) == 2
