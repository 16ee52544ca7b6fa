import os
import yaml
from derivchain.core.domain.settings import SystemSettings

# Environment variable -> settings field
ENV_OVERRIDES = {
    "AQUARIUS_URL": "aquarius_url",
    "AQUARIUS_USERNAME": "aquarius_username",
    "AQUARIUS_PASSWORD": "aquarius_password",
    "AQUARIUS_TOKEN": "aquarius_token",
    "DC_LOG_LEVEL": "log_level",
}


def load_settings(path: str | None = None) -> SystemSettings:
    """
    Load system settings from a YAML file.
    Falls back to environment variables if file doesn't exist or is not provided.

    Args:
        path: Path to config.yaml. Defaults to DC_CONFIG_FILE env var or "config.yaml".
    """
    if path is None:
        path = os.getenv("DC_CONFIG_FILE", "config.yaml")

    config_data = {}

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except Exception as e:
            raise RuntimeError(f"Failed to load configuration from {path}: {e}")

    # Env vars > File > Defaults
    for env_name, field_name in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config_data[field_name] = os.getenv(env_name)

    return SystemSettings(**config_data)
