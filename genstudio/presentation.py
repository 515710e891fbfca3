"""View model derived from the session, consumed by the page."""

from dataclasses import dataclass

from genstudio.utils.aliases import EncodedImage
from genstudio.utils.data_types import Session

GENERATE_PLACEHOLDER = "Describe what you want to see..."
EDIT_PLACEHOLDER = "e.g., 'Add a red hat' or 'Make it sunset'"


@dataclass(frozen=True)
class StudioView:
    title: str
    submit_label: str
    submit_enabled: bool
    placeholder: str
    busy_message: str | None
    error: str | None
    image: EncodedImage | None
    can_download: bool

    @property
    def edit_mode(self) -> bool:
        """Submit edits whenever an image is on screen."""
        return self.image is not None


def build_view(session: Session) -> StudioView:
    """Render-ready state. Submit stays disabled while busy or with a blank prompt."""
    editing = session.current_image is not None
    busy_message = None
    if session.busy:
        busy_message = "Editing image..." if editing else "Generating image..."
    return StudioView(
        title="Edit Image" if editing else "Generate New",
        submit_label="Apply Edit" if editing else "Generate Image",
        submit_enabled=not session.busy and bool(session.prompt.strip()),
        placeholder=EDIT_PLACEHOLDER if editing else GENERATE_PLACEHOLDER,
        busy_message=busy_message,
        error=session.last_error,
        image=session.current_image,
        can_download=editing,
    )
