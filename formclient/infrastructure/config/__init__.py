from formclient.infrastructure.config.env_settings import ClientSettings, get_settings, load_settings

__all__ = ["ClientSettings", "get_settings", "load_settings"]
