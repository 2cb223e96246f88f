from .settings import CollectionSettings, Config, load_config

__all__ = ["CollectionSettings", "Config", "load_config"]
