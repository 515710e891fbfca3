"""Gradio page wiring user intents to a StudioSession."""

from typing import Any

import gradio as gr
from loguru import logger

from genstudio.presentation import build_view
from genstudio.session import StudioSession
from genstudio.utils.errors import MalformedImageError
from genstudio.utils.images import to_pil

TIPS = """
**Quick Tips**
- Be specific about colors, lighting, and style.
- To edit, describe only the changes you want.
- Upload an existing photo to start editing.
"""


class StudioPage:
    """Single-page UI: one image slot, one prompt box, one submit button."""

    def __init__(self, studio: StudioSession, *, title: str = "Lego Studio"):
        self.studio = studio
        self.title = title

    def _preview(self, image: str | None) -> tuple[Any, str | None]:
        if image is None:
            return None, None
        try:
            return to_pil(image), None
        except MalformedImageError as e:
            logger.error(f"Cannot preview current image: {e}")
            return None, str(e)

    def render(self) -> tuple[Any, ...]:
        """Outputs for (heading, image, status, prompt, submit, download, clear)."""
        view = build_view(self.studio.state)
        preview, preview_error = self._preview(view.image)
        error = view.error or preview_error
        status = view.busy_message or (f"**Error:** {error}" if error else "")
        return (
            f"### {view.title}",
            preview,
            status,
            gr.update(value=self.studio.state.prompt, placeholder=view.placeholder),
            gr.update(value=view.submit_label, interactive=view.submit_enabled),
            gr.update(interactive=view.can_download),
            gr.update(interactive=view.image is not None and not self.studio.busy),
        )

    # Handlers are coroutines so every session mutation runs on the event loop.

    async def on_load(self) -> tuple[Any, ...]:
        return self.render()

    async def lock_submit(self) -> Any:
        # Runs before the request so a second click cannot race the busy guard
        return gr.update(interactive=False)

    async def on_prompt(self, text: str) -> Any:
        self.studio.set_prompt(text)
        return gr.update(interactive=self.studio.can_submit())

    async def on_submit(self, text: str) -> tuple[Any, ...]:
        self.studio.set_prompt(text)
        view = build_view(self.studio.state)
        await self.studio.submit(edit_mode=view.edit_mode)
        return self.render()

    async def on_upload(self, file_path: str | None) -> tuple[Any, ...]:
        if file_path:
            await self.studio.upload(file_path)
        return self.render()

    async def on_clear(self) -> tuple[Any, ...]:
        self.studio.clear()
        return self.render()

    async def on_download(self) -> Any:
        path = self.studio.download()
        if path is None:
            return gr.update(value=None, visible=False)
        return gr.update(value=str(path), visible=True)

    def build(self) -> gr.Blocks:
        with gr.Blocks(title=self.title) as demo:
            gr.Markdown(f"# {self.title}")
            with gr.Row():
                with gr.Column(scale=7):
                    image = gr.Image(label="Your creation will appear here", type="pil", interactive=False)
                    status = gr.Markdown()
                    with gr.Row():
                        download_btn = gr.Button("Download")
                        clear_btn = gr.Button("Clear", variant="stop")
                    download_file = gr.File(label="Download", visible=False, interactive=False)
                with gr.Column(scale=5):
                    heading = gr.Markdown()
                    prompt = gr.Textbox(label="Prompt", lines=5)
                    submit_btn = gr.Button(variant="primary")
                    upload_btn = gr.UploadButton("Upload Image", file_types=["image"], type="filepath")
                    gr.Markdown(TIPS)

            outputs = [heading, image, status, prompt, submit_btn, download_btn, clear_btn]

            demo.load(self.on_load, outputs=outputs)
            prompt.input(self.on_prompt, inputs=prompt, outputs=submit_btn)
            submit_btn.click(self.lock_submit, outputs=submit_btn, queue=False).then(
                self.on_submit, inputs=prompt, outputs=outputs
            )
            upload_btn.upload(self.on_upload, inputs=upload_btn, outputs=outputs)
            clear_btn.click(self.on_clear, outputs=outputs)
            download_btn.click(self.on_download, outputs=download_file)

        logger.info("Studio page built")
        return demo
