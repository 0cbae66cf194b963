from .commands import CommandManager, shape_params

__all__ = ["CommandManager", "shape_params"]
