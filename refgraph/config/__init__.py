from refgraph.config.loader import load_settings, resolve_settings_path

__all__ = ["load_settings", "resolve_settings_path"]
