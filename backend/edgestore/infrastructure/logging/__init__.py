from .colored_logger import OperationLogger, OperationStage
from .log_config import setup_logging

__all__ = ["OperationLogger", "OperationStage", "setup_logging"]
