from .setting import ComposerSettings, get_settings

__all__ = ["ComposerSettings", "get_settings"]
