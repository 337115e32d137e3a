"""
Logging configuration for the GamePilot mood and persona core
"""
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from loguru import logger


class LoggingSetup:
    """Centralized logging configuration"""

    def __init__(self, log_level: str = "INFO", log_dir: Optional[str] = None,
                 enable_file_logging: bool = False):
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else None
        self.enable_file_logging = enable_file_logging and self.log_dir is not None

        # Remove default logger
        logger.remove()

        # Setup console logging
        self._setup_console_logging()

        # Setup file logging
        if self.enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._setup_file_logging()

    def _setup_console_logging(self):
        """Setup console logging with colors"""
        logger.add(
            sys.stderr,
            level=self.log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                   "<level>{level: <8}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                   "<level>{message}</level>",
            colorize=True
        )

    def _setup_file_logging(self):
        """Setup file logging with rotation"""
        # General application logs
        logger.add(
            self.log_dir / "gamepilot.log",
            level=self.log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="100 MB",
            retention="7 days",
            compression="zip"
        )

        # Error logs
        logger.add(
            self.log_dir / "errors.log",
            level="ERROR",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="50 MB",
            retention="30 days",
            compression="zip"
        )

        # Persona analysis logs
        logger.add(
            self.log_dir / "persona.log",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="100 MB",
            retention="14 days",
            compression="zip",
            filter=lambda record: "persona" in record["name"]
        )


class PerformanceLogger:
    """Logger for analysis timings"""

    def __init__(self):
        self.logger = logger.bind(component="performance")

    def log_execution_time(self, function_name: str, duration: float, parameters: Optional[Dict[str, Any]] = None):
        """Log function execution time"""
        self.logger.bind(
            function=function_name,
            duration_seconds=duration,
            parameters=parameters or {},
            stage="timing"
        ).info(f"{function_name} executed in {duration:.3f}s")

    def log_throughput(self, operation: str, items_processed: int, duration: float):
        """Log processing throughput"""
        throughput = items_processed / duration if duration > 0 else 0
        self.logger.bind(
            operation=operation,
            items_processed=items_processed,
            duration_seconds=duration,
            throughput=throughput,
            stage="throughput"
        ).info(f"{operation} throughput: {throughput:.2f} items/second")


def setup_logging(config=None) -> LoggingSetup:
    """
    Configure loguru sinks.

    Args:
        config: Optional LoggingConfig section from SystemConfig

    Returns:
        The applied logging setup
    """
    if config is None:
        return LoggingSetup()
    return LoggingSetup(
        log_level=config.level,
        log_dir=config.log_dir,
        enable_file_logging=config.enable_file_logging
    )


def get_performance_logger() -> PerformanceLogger:
    """Get a performance logger"""
    return PerformanceLogger()


def setup_logger(name: str):
    """Get a logger bound to the given component name"""
    return logger.bind(component=name)


__all__ = ["logger", "setup_logging", "get_performance_logger", "setup_logger", "PerformanceLogger"]
