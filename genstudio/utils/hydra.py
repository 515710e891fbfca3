from loguru import logger
from omegaconf import DictConfig, OmegaConf

HYDRA_TARGET_KEY = "_target_"
REQUIRED_STUDIO_KEYS = ("model", "session.default_prompt", "export.output_dir", "server.port")


def ensure_required_keys(cfg: DictConfig, *required_keys: str) -> None:
    """Validate that cfg contains all required (dotted) keys.

    Example:
        ensure_required_keys(cfg, "model", "server.port")

    Raises KeyError naming the first missing key.
    """
    for key in required_keys:
        node = OmegaConf.select(cfg, key)
        if node is None:
            raise KeyError(key)
    logger.info(f'Validating config: keys "{", ".join(required_keys)}" are present.')


def validate_studio_config(cfg: DictConfig) -> None:
    ensure_required_keys(cfg, *REQUIRED_STUDIO_KEYS)
    if HYDRA_TARGET_KEY not in cfg.model:
        raise KeyError(f"model.{HYDRA_TARGET_KEY}")
