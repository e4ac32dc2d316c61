from .cli import ChatCLI, render_frame

__all__ = ["ChatCLI", "render_frame"]
