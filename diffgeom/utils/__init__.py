from .logging import get_logger, set_level

__all__ = ["get_logger", "set_level"]
