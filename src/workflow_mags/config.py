# ===================================== IMPORTS ====================================== #

# Standard Library Imports
from pathlib import Path
from typing import Dict, Union

# Third-Party Imports
import yaml

# Local Imports
from workflow_mags import constants

# ==================================== FUNCTIONS ===================================== #

def resolve_relative_paths(config: Dict, config_dir: Path) -> Dict:
    """Converts any relative paths in the configuration to absolute paths based on
    the directory of the config file."""
    for key, value in config.items():
        if isinstance(value, str):
            # Check if the value is a relative path
            if value.startswith("./") or value.startswith("../"):
                config[key] = (config_dir / value).resolve()
        elif isinstance(value, dict):
            # Recursively handle nested dictionaries
            config[key] = resolve_relative_paths(value, config_dir)
    return config


def get_config(
    config_path: Union[str, Path] = constants.DEFAULT_CONFIG_PATH
) -> Dict:
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as file:
        config = yaml.safe_load(file) or {}

    config_dir = config_path.resolve().parent
    return resolve_relative_paths(config, config_dir)


def is_enabled(config: Dict, section: str, default: bool = True) -> bool:
    return config.get(section, {}).get("enabled", default)
