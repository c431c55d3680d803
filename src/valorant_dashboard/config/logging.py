import structlog
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from valorant_dashboard.config.settings import settings


class LogConfig:
    """Centralized logging configuration"""

    def __init__(self):
        self.project_root = self._get_project_root()
        self.logs_dir = self.project_root / "logs"
        self.logs_dir.mkdir(exist_ok=True)

        # Log file paths
        self.main_log = self.logs_dir / "dashboard.log"
        self.auth_log = self.logs_dir / "riot_auth.log"
        self.session_log = self.logs_dir / "sessions.log"
        self.error_log = self.logs_dir / "errors.log"

        self.log_level = self._resolve_level()
        self.file_log_level = logging.DEBUG  # Always debug for files

        # Formatters
        self.detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)-20s | %(levelname)-8s | %(funcName)-20s:%(lineno)-4d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.simple_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def _get_project_root(self) -> Path:
        """Get the project root directory"""
        current_file = Path(__file__).resolve()
        # Navigate up from src/valorant_dashboard/config/logging.py to project root
        return current_file.parent.parent.parent.parent

    def _resolve_level(self) -> int:
        """LOG_LEVEL wins; otherwise debug in development and warnings only in production."""
        if settings.log_level:
            level = logging.getLevelName(settings.log_level.upper())
            if isinstance(level, int):
                return level
        if settings.debug:
            return logging.DEBUG
        return logging.WARNING if settings.is_production else logging.DEBUG

    def create_rotating_handler(self, filepath: Path, max_bytes: int = 10*1024*1024, backup_count: int = 5) -> logging.Handler:
        """Create a rotating file handler with proper configuration"""
        handler = logging.handlers.RotatingFileHandler(
            filepath,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        handler.setLevel(self.file_log_level)
        handler.setFormatter(self.detailed_formatter)
        return handler

    def create_console_handler(self) -> logging.Handler:
        """Create console handler for stdout"""
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.log_level)

        formatter = self.detailed_formatter if settings.debug else self.simple_formatter
        handler.setFormatter(formatter)
        return handler

    def create_error_handler(self) -> logging.Handler:
        """Create handler specifically for error logs"""
        handler = logging.handlers.RotatingFileHandler(
            self.error_log,
            maxBytes=5*1024*1024,
            backupCount=10,
            encoding='utf-8'
        )
        handler.setLevel(logging.ERROR)
        handler.setFormatter(self.detailed_formatter)
        return handler


def configure_logging():
    """Configure logging for the entire application"""
    config = LogConfig()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_logger.setLevel(config.log_level)
    root_logger.addHandler(config.create_console_handler())
    root_logger.addHandler(config.create_rotating_handler(config.main_log))
    root_logger.addHandler(config.create_error_handler())

    setup_specialized_loggers(config)

    configure_structlog(config)

    logger = structlog.get_logger("logging")
    logger.info("Logging system initialized",
                log_level=logging.getLevelName(config.log_level),
                logs_directory=str(config.logs_dir),
                environment=settings.environment,
                debug_mode=settings.debug)


def setup_specialized_loggers(config: LogConfig):
    """Setup specialized loggers for the auth handshake and the session layer"""

    # Upstream Riot handshake logger
    auth_logger = logging.getLogger("riot_auth")
    auth_logger.handlers.clear()
    auth_logger.setLevel(config.log_level)
    auth_logger.addHandler(config.create_rotating_handler(config.auth_log))
    auth_logger.addHandler(config.create_console_handler())
    auth_logger.addHandler(config.create_error_handler())
    auth_logger.propagate = False

    # Session store / manager / account registry logger
    session_logger = logging.getLogger("session")
    session_logger.handlers.clear()
    session_logger.setLevel(config.log_level)
    session_logger.addHandler(config.create_rotating_handler(config.session_log))
    session_logger.addHandler(config.create_console_handler())
    session_logger.addHandler(config.create_error_handler())
    session_logger.propagate = False

    # Database logger
    db_logger = logging.getLogger("database")
    db_logger.handlers.clear()
    db_logger.setLevel(logging.INFO)  # Less verbose for DB
    db_logger.addHandler(config.create_rotating_handler(config.main_log))
    db_logger.addHandler(config.create_error_handler())
    db_logger.propagate = False


def configure_structlog(config: LogConfig):
    """Configure structlog with proper processors"""
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger for the given name"""
    return structlog.get_logger(name)


def short_puuid(puuid: Optional[str]) -> str:
    """First 8 characters of a PUUID, the only form that is ever logged"""
    return (puuid or "")[:8]
