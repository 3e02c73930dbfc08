import os
import tomllib
from pathlib import Path
from dacite import Config as DaciteConfig, from_dict
from utils.config import Config

CONFIG_FILE = Path(__file__).parent.parent / "config.toml"


def load_config(path: str | Path | None = None) -> Config:
    """Load ``config.toml`` into a typed :class:`Config`.

    ``LLM_MODEL`` in the environment overrides ``[llm].model``.
    """
    config_path = Path(path) if path else CONFIG_FILE
    with open(config_path, "rb") as f:
        config_dict = tomllib.load(f)

    config = from_dict(Config, config_dict, config=DaciteConfig(cast=[float], strict=True))

    model_override = os.getenv("LLM_MODEL")
    if model_override:
        config.llm.model = model_override
    return config
