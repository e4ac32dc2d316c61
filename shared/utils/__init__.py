from .common import default_display_name, local_timestamp

__all__ = ["default_display_name", "local_timestamp"]
