from .config import RoastConfig, load_config

__all__ = ["RoastConfig", "load_config"]
