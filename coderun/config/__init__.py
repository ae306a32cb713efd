from .settings import CLISettings, SettingsStore

__all__ = ["CLISettings", "SettingsStore"]
