import asyncio
import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from PIL import Image

from genstudio.clients.base import BaseImageClient
from genstudio.session import StudioSession
from genstudio.utils.aliases import InlineImagePart, TextPart
from genstudio.utils.constants import DEFAULT_PROMPT, EMPTY_RESPONSE_MESSAGE, GENERIC_FAILURE_MESSAGE
from genstudio.utils.data_types import Empty, ImageProduced, TextOnly
from genstudio.utils.images import encode_from_wire

EXISTING = encode_from_wire(b"existing-image", "image/png")


def make_response(parts, text=None):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))], text=text)


def image_response(data: bytes = b"new-image", mime_type: str = "image/png", text=None):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)
    return make_response([part], text=text)


def text_response(text: str):
    return make_response([SimpleNamespace(inline_data=None, text=text)], text=text)


class FakeClient(BaseImageClient):
    """Records the parts it is sent and replays a canned response or error."""

    model_name = "fake-image-model"

    def __init__(self, response=None, error: BaseException | None = None, gate: asyncio.Event | None = None):
        self.response = response
        self.error = error
        self.gate = gate
        self.calls: list[list] = []

    async def _generate_from_parts(self, parts):
        self.calls.append(parts)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


def make_studio(client, prompt="a red bicycle", image=None, exporter=None) -> StudioSession:
    studio = StudioSession(client, exporter=exporter or MagicMock())
    studio.set_prompt(prompt)
    studio.state.current_image = image
    return studio


def write_png(path, color="green"):
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return buffer.getvalue()


class TestInitialState:
    def test_idle_with_default_prompt(self):
        studio = StudioSession(FakeClient())
        assert studio.state.prompt == DEFAULT_PROMPT
        assert studio.state.current_image is None
        assert studio.state.last_error is None
        assert not studio.state.busy
        assert not studio.busy

    def test_custom_default_prompt(self):
        studio = StudioSession(FakeClient(), default_prompt="a castle")
        assert studio.state.prompt == "a castle"


class TestSubmitScenarios:
    """End-to-end submit scenarios against a fake remote client."""

    def test_generate_produces_image(self):
        client = FakeClient(response=image_response(b"bicycle"))
        studio = make_studio(client, prompt="a red bicycle")

        outcome = asyncio.run(studio.submit(edit_mode=False))

        assert outcome == ImageProduced(encode_from_wire(b"bicycle", "image/png"))
        assert studio.state.current_image == encode_from_wire(b"bicycle", "image/png")
        assert studio.state.last_error is None
        assert not studio.state.busy
        assert client.calls == [[TextPart("a red bicycle")]]

    def test_edit_text_only_keeps_image(self):
        client = FakeClient(response=text_response("I cannot edit that"))
        studio = make_studio(client, prompt="add a basket", image=EXISTING)

        outcome = asyncio.run(studio.submit(edit_mode=True))

        assert outcome == TextOnly("I cannot edit that")
        assert studio.state.current_image == EXISTING
        assert "I cannot edit that" in studio.state.last_error
        assert not studio.state.busy
        assert client.calls == [[InlineImagePart(data=b"existing-image", mime_type="image/png"), TextPart("add a basket")]]

    def test_remote_failure_message_is_surfaced(self):
        client = FakeClient(error=TimeoutError("timeout"))
        studio = make_studio(client, image=EXISTING)

        outcome = asyncio.run(studio.submit(edit_mode=True))

        assert outcome is None
        assert studio.state.last_error == "timeout"
        assert studio.state.current_image == EXISTING
        assert not studio.state.busy

    def test_remote_failure_without_message(self):
        studio = make_studio(FakeClient(error=RuntimeError()))
        asyncio.run(studio.submit())
        assert studio.state.last_error == GENERIC_FAILURE_MESSAGE
        assert not studio.busy

    def test_empty_response(self):
        studio = make_studio(FakeClient(response=make_response([])))
        outcome = asyncio.run(studio.submit())
        assert outcome == Empty()
        assert studio.state.last_error == EMPTY_RESPONSE_MESSAGE
        assert studio.state.current_image is None

    def test_image_wins_over_text(self):
        studio = make_studio(FakeClient(response=image_response(b"pic", text="Here is your picture")))
        asyncio.run(studio.submit())
        assert studio.state.current_image == encode_from_wire(b"pic", "image/png")
        assert studio.state.last_error is None

    def test_malformed_current_image_is_reported(self):
        client = FakeClient(response=image_response())
        studio = make_studio(client, image="garbage")
        asyncio.run(studio.submit(edit_mode=True))
        assert studio.state.last_error is not None
        assert studio.state.current_image == "garbage"
        assert client.calls == []
        assert not studio.busy


class TestSubmitProperties:
    """Properties that hold for every submit."""

    def test_edit_without_image_equals_generation(self):
        edit_client = FakeClient(response=image_response(b"same"))
        gen_client = FakeClient(response=image_response(b"same"))
        edit_studio = make_studio(edit_client)
        gen_studio = make_studio(gen_client)

        asyncio.run(edit_studio.submit(edit_mode=True))
        asyncio.run(gen_studio.submit(edit_mode=False))

        assert edit_client.calls == gen_client.calls
        assert edit_studio.state == gen_studio.state

    @pytest.mark.parametrize(
        "client",
        [
            FakeClient(response=image_response()),
            FakeClient(response=text_response("nope")),
            FakeClient(response=make_response([])),
            FakeClient(response=None),
            FakeClient(error=ConnectionError("network down")),
            FakeClient(error=PermissionError("invalid api key")),
        ],
    )
    def test_exactly_one_of_image_or_error(self, client):
        studio = make_studio(client, image=EXISTING)
        asyncio.run(studio.submit(edit_mode=True))
        image_updated = studio.state.current_image != EXISTING
        error_set = studio.state.last_error is not None
        assert image_updated != error_set
        assert not studio.busy

    def test_previous_error_cleared_on_next_submit(self):
        studio = make_studio(FakeClient(error=TimeoutError("timeout")))
        asyncio.run(studio.submit())
        assert studio.state.last_error == "timeout"

        studio.client = FakeClient(response=image_response())
        asyncio.run(studio.submit())
        assert studio.state.last_error is None

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    def test_blank_prompt_is_rejected(self, prompt):
        client = FakeClient(response=image_response())
        studio = make_studio(client, prompt=prompt)
        studio.state.last_error = "old error"

        assert asyncio.run(studio.submit()) is None
        assert client.calls == []
        assert studio.state.last_error == "old error"

    def test_no_retry_after_failure(self):
        client = FakeClient(error=ConnectionError("down"))
        studio = make_studio(client)
        asyncio.run(studio.submit())
        assert len(client.calls) == 1


class TestSingleFlight:
    """A second submit while one is pending must be rejected."""

    def test_concurrent_submit_rejected(self):
        async def scenario():
            gate = asyncio.Event()
            client = FakeClient(response=image_response(b"first"), gate=gate)
            studio = make_studio(client)

            first = asyncio.create_task(studio.submit())
            await asyncio.sleep(0)
            assert studio.busy
            assert studio.state.busy
            assert not studio.can_submit()

            second = await studio.submit()
            assert second is None
            assert len(client.calls) == 1

            gate.set()
            outcome = await first
            return studio, client, outcome

        studio, client, outcome = asyncio.run(scenario())
        assert outcome == ImageProduced(encode_from_wire(b"first", "image/png"))
        assert len(client.calls) == 1
        assert not studio.busy
        assert studio.can_submit()

    def test_tasks_scheduled_together_issue_one_call(self):
        async def scenario():
            gate = asyncio.Event()
            client = FakeClient(response=image_response(), gate=gate)
            studio = make_studio(client)
            tasks = [asyncio.create_task(studio.submit()) for _ in range(3)]
            await asyncio.sleep(0)
            gate.set()
            return client, await asyncio.gather(*tasks)

        client, results = asyncio.run(scenario())
        assert len(client.calls) == 1
        assert sum(r is not None for r in results) == 1

    def test_token_released_after_failure(self):
        studio = make_studio(FakeClient(error=RuntimeError("boom")))
        asyncio.run(studio.submit())
        assert not studio.busy
        studio.client = FakeClient(response=image_response())
        assert asyncio.run(studio.submit()) is not None

    def test_token_released_on_cancellation(self):
        async def scenario():
            gate = asyncio.Event()
            studio = make_studio(FakeClient(response=image_response(), gate=gate))
            task = asyncio.create_task(studio.submit())
            await asyncio.sleep(0)
            assert studio.busy
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return studio

        studio = asyncio.run(scenario())
        assert not studio.busy
        assert not studio.state.busy

    def test_upload_and_clear_rejected_while_busy(self, tmp_path):
        path = tmp_path / "photo.png"
        write_png(path)

        async def scenario():
            gate = asyncio.Event()
            studio = make_studio(FakeClient(response=image_response(b"result"), gate=gate), image=EXISTING)
            task = asyncio.create_task(studio.submit(edit_mode=True))
            await asyncio.sleep(0)
            uploaded = await studio.upload(path)
            cleared = studio.clear()
            assert studio.state.current_image == EXISTING
            gate.set()
            await task
            return studio, uploaded, cleared

        studio, uploaded, cleared = asyncio.run(scenario())
        assert uploaded is False
        assert cleared is False
        assert studio.state.current_image == encode_from_wire(b"result", "image/png")
        assert studio.state.prompt == "a red bicycle"

    def test_upload_discarded_when_submit_starts_during_read(self, monkeypatch, tmp_path):
        path = tmp_path / "photo.png"
        write_png(path)

        async def scenario():
            read_gate = asyncio.Event()
            submit_gate = asyncio.Event()

            async def slow_read(p, declared_type=None):
                await read_gate.wait()
                return encode_from_wire(b"uploaded", "image/png")

            monkeypatch.setattr("genstudio.session.encode_from_local_file", slow_read)
            studio = make_studio(FakeClient(response=image_response(b"result"), gate=submit_gate), image=EXISTING)

            upload = asyncio.create_task(studio.upload(path))
            await asyncio.sleep(0)
            submit = asyncio.create_task(studio.submit(edit_mode=True))
            await asyncio.sleep(0)
            assert studio.busy

            read_gate.set()
            uploaded = await upload
            assert studio.state.current_image == EXISTING
            assert studio.state.prompt == "a red bicycle"
            assert studio.state.last_error is None

            submit_gate.set()
            await submit
            return studio, uploaded

        studio, uploaded = asyncio.run(scenario())
        assert uploaded is False
        assert studio.state.current_image == encode_from_wire(b"result", "image/png")
        assert studio.state.last_error is None


class TestUpload:
    def test_valid_png_replaces_image_and_clears_prompt(self, tmp_path):
        path = tmp_path / "photo.png"
        data = write_png(path)
        studio = make_studio(FakeClient(), image=EXISTING)

        assert asyncio.run(studio.upload(path)) is True

        assert studio.state.current_image == encode_from_wire(data, "image/png")
        assert studio.state.prompt == ""

    def test_upload_keeps_previous_error(self, tmp_path):
        path = tmp_path / "photo.png"
        write_png(path)
        studio = make_studio(FakeClient())
        studio.state.last_error = "timeout"
        asyncio.run(studio.upload(path))
        assert studio.state.last_error == "timeout"

    def test_unreadable_file_sets_error(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        studio = make_studio(FakeClient(), image=EXISTING)

        assert asyncio.run(studio.upload(path)) is False

        assert studio.state.current_image == EXISTING
        assert studio.state.prompt == "a red bicycle"
        assert "notes.txt" in studio.state.last_error


class TestClearAndDownload:
    def test_clear_is_idempotent(self):
        studio = make_studio(FakeClient(), image=EXISTING)
        assert studio.clear() is True
        assert studio.state.current_image is None
        assert studio.clear() is True
        assert studio.state.current_image is None

    def test_clear_keeps_prompt_and_error(self):
        studio = make_studio(FakeClient(), prompt="keep me", image=EXISTING)
        studio.state.last_error = "old"
        studio.clear()
        assert studio.state.prompt == "keep me"
        assert studio.state.last_error == "old"

    def test_download_exports_current_image(self, tmp_path):
        exporter = MagicMock()
        exporter.export.return_value = tmp_path / "generated-image.png"
        studio = make_studio(FakeClient(), image=EXISTING, exporter=exporter)

        assert studio.download() == tmp_path / "generated-image.png"
        exporter.export.assert_called_once_with(EXISTING)
        assert studio.state.current_image == EXISTING

    def test_download_without_image_is_noop(self):
        exporter = MagicMock()
        studio = make_studio(FakeClient(), exporter=exporter)
        assert studio.download() is None
        exporter.export.assert_not_called()
