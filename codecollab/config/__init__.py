from codecollab.config.settings import CollabSettings, load_settings

__all__ = ["CollabSettings", "load_settings"]
