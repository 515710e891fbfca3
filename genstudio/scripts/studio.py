"""Launch the image studio page.

Steps:
1. Validate the Hydra config and load environment variables (.env).
2. Instantiate the model client via Hydra, plus the exporter and session.
3. Build the Gradio page and serve it with a single-worker queue.
"""

import hydra
from dotenv import load_dotenv
from hydra.utils import instantiate
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from genstudio.clients.base import BaseImageClient
from genstudio.export import FileImageExporter
from genstudio.page import StudioPage
from genstudio.session import StudioSession
from genstudio.utils.hydra import validate_studio_config


def build_studio(config: DictConfig) -> StudioSession:
    client: BaseImageClient = instantiate(config.model)
    exporter = FileImageExporter(
        output_dir=str(config.export.output_dir),
        filename=str(config.export.get("filename", "generated-image")),
    )
    logger.info(f"Instantiated components | model={client.__class__.__name__} export_dir={exporter.output_dir}")
    return StudioSession(client, exporter, default_prompt=str(config.session.default_prompt))


@hydra.main(version_base=None, config_path="../../configs", config_name="studio")
def main(config: DictConfig) -> None:
    """Studio entry point."""
    validate_studio_config(config)
    load_dotenv(override=True)
    logger.info("Environment variables loaded (dotenv)")
    logger.info(f"Configuration:\n{OmegaConf.to_yaml(config)}")

    studio = build_studio(config)
    page = StudioPage(studio, title=str(config.server.get("title", "Lego Studio")))
    demo = page.build()
    demo.queue(default_concurrency_limit=1).launch(
        server_name=str(config.server.get("host", "127.0.0.1")),
        server_port=int(config.server.port),
    )


if __name__ == "__main__":  # pragma: no cover
    # pylint: disable=no-value-for-parameter
    main()
