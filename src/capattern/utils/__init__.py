from .logging_config import get_module_logger, set_log_level

__all__ = ["get_module_logger", "set_log_level"]
