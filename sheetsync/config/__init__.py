from .loader import ConfigError, apply_overrides, env_overrides, load_config

__all__ = ["ConfigError", "load_config", "apply_overrides", "env_overrides"]
