"""Image export collaborator: writes the current image where the user can save it."""

from pathlib import Path
from typing import Protocol

from loguru import logger

from genstudio.utils.aliases import EncodedImage
from genstudio.utils.constants import DOWNLOAD_FILENAME
from genstudio.utils.images import decode_for_wire, extension_for


class ImageExporter(Protocol):
    def export(self, image: EncodedImage) -> Path: ...


class FileImageExporter:
    """Write the image to ``<output_dir>/<filename><ext>``, overwriting the previous export."""

    def __init__(self, output_dir: str | Path = ".", filename: str = DOWNLOAD_FILENAME):
        self.output_dir = Path(output_dir)
        self.filename = filename

    def export(self, image: EncodedImage) -> Path:
        wire = decode_for_wire(image)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{self.filename}{extension_for(wire.mime_type)}"
        path.write_bytes(wire.data)
        logger.info(f"Exported {len(wire.data)} bytes to {path}")
        return path
