"""Session state machine sequencing generate, edit, upload, clear and download.

One ``StudioSession`` owns the one ``Session`` of an application instance.
The machine is either idle or busy with exactly one remote call; the
single-flight token is taken before the first suspension point and released
on every exit path.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from genstudio.clients.base import BaseImageClient
from genstudio.export import FileImageExporter, ImageExporter
from genstudio.request_builder import build_request
from genstudio.response_interpreter import interpret
from genstudio.utils.constants import DEFAULT_PROMPT, N_DEBUG_PROMPT_CHARS
from genstudio.utils.data_types import Empty, GenerationOutcome, ImageProduced, Session, TextOnly
from genstudio.utils.errors import (
    EmptyResponse,
    FileReadError,
    MalformedImageError,
    RemoteCallFailure,
    TextOnlyResponse,
)
from genstudio.utils.images import encode_from_local_file


class StudioSession:
    """Owns the session and applies user intents to it."""

    def __init__(
        self,
        client: BaseImageClient,
        exporter: ImageExporter | None = None,
        *,
        default_prompt: str = DEFAULT_PROMPT,
    ) -> None:
        self.client = client
        self.exporter: ImageExporter = exporter if exporter is not None else FileImageExporter()
        self.state = Session(prompt=default_prompt)
        self._inflight: object | None = None

    @property
    def busy(self) -> bool:
        return self._inflight is not None

    def can_submit(self) -> bool:
        return bool(self.state.prompt.strip()) and not self.busy

    def set_prompt(self, text: str) -> None:
        self.state.prompt = text

    @contextmanager
    def _single_flight(self) -> Iterator[object]:
        token = object()
        self._inflight = token
        self.state.busy = True
        try:
            yield token
        finally:
            self._inflight = None
            self.state.busy = False

    async def submit(self, edit_mode: bool = False) -> GenerationOutcome | None:
        """Generate (or edit) an image from the current prompt.

        Args:
            edit_mode: Send the current image as context, when there is one.
        Returns:
            The interpreted outcome, or None when the intent was rejected or
            the remote call failed (``last_error`` then holds the reason).
        """
        if not self.state.prompt.strip():
            logger.warning("Ignoring submit: prompt is empty")
            return None
        if self.busy:
            logger.warning("Ignoring submit: a request is already in flight")
            return None

        with self._single_flight():
            self.state.last_error = None
            request = build_request(self.state, edit_mode)
            logger.info(
                f"Submitting {'edit' if request.is_edit else 'generation'}: "
                f"{request.prompt_text[:N_DEBUG_PROMPT_CHARS]!r}"
            )
            try:
                raw = await self.client.generate(request)
            except MalformedImageError as e:
                logger.error(f"Current image could not be sent: {e}")
                self.state.last_error = str(e)
                return None
            except Exception as e:  # noqa: BLE001 - every remote failure is shown to the user
                failure = RemoteCallFailure(e)
                logger.error(f"Generation error: {failure}")
                self.state.last_error = str(failure)
                return None

            outcome = interpret(raw)
            self._apply(outcome)
            return outcome

    def _apply(self, outcome: GenerationOutcome) -> None:
        if isinstance(outcome, ImageProduced):
            self.state.current_image = outcome.image
            logger.success("Image updated")
        elif isinstance(outcome, TextOnly):
            self.state.last_error = str(TextOnlyResponse(outcome.text))
            logger.warning(f"Model returned text only ({len(outcome.text)} chars)")
        elif isinstance(outcome, Empty):
            self.state.last_error = str(EmptyResponse())
            logger.warning("Model returned neither image nor text")

    async def upload(self, path: str | Path, declared_type: str | None = None) -> bool:
        """Replace the current image with a local file and clear the prompt.

        Rejected while a request is in flight, including when one started
        while the file was being read. That late discard leaves ``last_error``
        alone so the in-flight submit still reports exactly one result.
        Returns True when the image was replaced.
        """
        if self.busy:
            logger.warning("Ignoring upload: a request is in flight")
            return False
        try:
            image = await encode_from_local_file(path, declared_type)
        except FileReadError as e:
            logger.error(f"Upload failed: {e}")
            self.state.last_error = str(e)
            return False
        if self.busy:
            logger.warning("Discarding upload: a request started while the file was read")
            return False

        self.state.current_image = image
        self.state.prompt = ""
        logger.info(f"Uploaded image from {Path(path).name}")
        return True

    def clear(self) -> bool:
        """Drop the current image. Rejected while a request is in flight."""
        if self.busy:
            logger.warning("Ignoring clear: a request is in flight")
            return False
        self.state.current_image = None
        return True

    def download(self) -> Path | None:
        if self.state.current_image is None:
            return None
        return self.exporter.export(self.state.current_image)
