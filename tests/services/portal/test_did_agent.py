"""
D-ID Client Tests
=================

Tests for talk creation and polling against a mocked D-ID API.

Version: 0.1.0
"""

import json

import httpx
import pytest

from services.portal.services.did_agent import (
    DIDAgentClient,
    DIDAgentError,
    DIDConfig,
    DIDNotConfiguredError,
    TalkFailedError,
    TalkTimeoutError,
)


# =============================================================================
# Fixtures
# =============================================================================


class Recorder:
    """Collects requests and the client's sleep calls."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


def make_client(handler, recorder: Recorder, **config) -> DIDAgentClient:
    def transport_handler(request: httpx.Request) -> httpx.Response:
        recorder.requests.append(request)
        return handler(request)

    return DIDAgentClient(
        config=DIDConfig(api_key="key:secret", **config),
        transport=httpx.MockTransport(transport_handler),
        sleep=recorder.sleep,
    )


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


class TestCreateTalk:
    async def test_posts_payload(self, recorder: Recorder) -> None:
        client = make_client(lambda r: httpx.Response(201, json={"id": "tlk_1", "status": "created"}), recorder)

        talk = await client.create_talk("Hello there")

        assert talk["id"] == "tlk_1"
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/talks"
        assert request.headers["Authorization"] == "Basic key:secret"
        body = json.loads(request.content)
        assert body["script"]["input"] == "Hello there"
        assert body["script"]["provider"]["voice_id"] == "en-US-ChristopherNeural"
        assert body["presenter_id"] == "kgn-KqCZSo"
        assert body["driver_id"] == "mdo-gpt"
        await client.close()

    async def test_presenter_override(self, recorder: Recorder) -> None:
        client = make_client(lambda r: httpx.Response(201, json={"id": "tlk_2"}), recorder)

        await client.create_talk("Hi", presenter_id="custom", driver_id="drv")

        body = json.loads(recorder.requests[0].content)
        assert body["presenter_id"] == "custom"
        assert body["driver_id"] == "drv"
        await client.close()

    async def test_blank_text_rejected(self, recorder: Recorder) -> None:
        client = make_client(lambda r: httpx.Response(201, json={}), recorder)

        with pytest.raises(DIDAgentError) as exc_info:
            await client.create_talk("   ")

        assert exc_info.value.status_code == 400
        assert recorder.requests == []

    async def test_upstream_error_status_kept(self, recorder: Recorder) -> None:
        client = make_client(lambda r: httpx.Response(402, json={"message": "Insufficient credits"}), recorder)

        with pytest.raises(DIDAgentError) as exc_info:
            await client.create_talk("Hello")

        assert exc_info.value.status_code == 402
        assert exc_info.value.message == "Insufficient credits"
        await client.close()

    async def test_missing_api_key(self) -> None:
        client = DIDAgentClient(config=DIDConfig(api_key=""))

        with pytest.raises(DIDNotConfiguredError) as exc_info:
            await client.create_talk("Hello")

        assert exc_info.value.status_code == 500


class TestWaitForTalk:
    async def test_polls_until_done(self, recorder: Recorder) -> None:
        statuses = iter(["created", "started", "done"])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "tlk_1", "status": next(statuses), "result_url": "https://v/1.mp4"})

        client = make_client(handler, recorder)

        talk = await client.wait_for_talk("tlk_1", interval_seconds=0.5)

        assert talk["status"] == "done"
        assert len(recorder.requests) == 3
        assert recorder.sleeps == [0.5, 0.5]
        await client.close()

    async def test_error_state_raises(self, recorder: Recorder) -> None:
        client = make_client(
            lambda r: httpx.Response(200, json={"id": "tlk_1", "status": "error", "error": {"description": "bad face"}}),
            recorder,
        )

        with pytest.raises(TalkFailedError) as exc_info:
            await client.wait_for_talk("tlk_1")

        assert exc_info.value.message == "bad face"
        await client.close()

    async def test_timeout(self, recorder: Recorder) -> None:
        client = make_client(lambda r: httpx.Response(200, json={"id": "tlk_1", "status": "started"}), recorder)

        with pytest.raises(TalkTimeoutError) as exc_info:
            await client.wait_for_talk("tlk_1", timeout_seconds=0)

        assert exc_info.value.status_code == 504
        assert exc_info.value.talk_id == "tlk_1"
        assert len(recorder.requests) == 1
        await client.close()
