"""Logging configuration with structured (JSON) output and event loggers."""

import logging
import logging.config
import sys
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, Any, Optional

from pythonjsonlogger.json import JsonFormatter

from tradelog import __version__


class StructuredFormatter(JsonFormatter):
    """JSON formatter that stamps service metadata and request context."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(UTC).isoformat()
        log_record['service'] = 'tradelog'
        log_record['version'] = __version__

        for key in ('request_id', 'user_id', 'duration', 'status_code'):
            if hasattr(record, key):
                log_record[key] = getattr(record, key)


class PerformanceLogger:
    """Logger for request timings."""

    def __init__(self, logger_name: str = "performance"):
        self.logger = logging.getLogger(logger_name)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        request_id: Optional[str] = None,
        **extra_fields
    ):
        """Log request performance metrics."""
        extra = {
            'event_type': 'request',
            'method': method,
            'path': path,
            'status_code': status_code,
            'duration': duration,
            'request_id': request_id,
            **extra_fields
        }

        if duration > 5.0:
            level = logging.ERROR
            message = f"Very slow request: {method} {path} took {duration:.2f}s"
        elif duration > 2.0:
            level = logging.WARNING
            message = f"Slow request: {method} {path} took {duration:.2f}s"
        else:
            level = logging.DEBUG
            message = f"Request: {method} {path} -> {status_code} in {duration:.3f}s"

        self.logger.log(level, message, extra=extra)


class SecurityLogger:
    """Logger for authentication events. Passwords and tokens are never logged."""

    def __init__(self, logger_name: str = "security"):
        self.logger = logging.getLogger(logger_name)

    def log_authentication_attempt(
        self,
        email: str,
        success: bool,
        reason: Optional[str] = None,
        **extra_fields
    ):
        """Log login attempts."""
        extra = {
            'event_type': 'authentication',
            'email': email,
            'success': success,
            'reason': reason,
            **extra_fields
        }

        if success:
            self.logger.info(f"Successful login for {email}", extra=extra)
        else:
            self.logger.warning(f"Failed login attempt for {email}: {reason}", extra=extra)

    def log_signup(self, email: str, success: bool, reason: Optional[str] = None, **extra_fields):
        """Log account creation attempts."""
        extra = {
            'event_type': 'signup',
            'email': email,
            'success': success,
            'reason': reason,
            **extra_fields
        }

        if success:
            self.logger.info(f"New account registered: {email}", extra=extra)
        else:
            self.logger.warning(f"Signup rejected for {email}: {reason}", extra=extra)

    def log_token_rejected(self, reason: str, **extra_fields):
        """Log session tokens that failed verification."""
        extra = {
            'event_type': 'token_rejected',
            'reason': reason,
            **extra_fields
        }
        self.logger.info(f"Session token rejected: {reason}", extra=extra)


class BusinessLogger:
    """Logger for journal events."""

    def __init__(self, logger_name: str = "business"):
        self.logger = logging.getLogger(logger_name)

    def log_trade_recorded(
        self,
        user_id: str,
        trade_id: str,
        symbol: str,
        quantity: int,
        pnl: Any,
        source: str,
        **extra_fields
    ):
        """Log a newly journaled trade."""
        extra = {
            'event_type': 'trade_recorded',
            'user_id': user_id,
            'trade_id': trade_id,
            'symbol': symbol,
            'quantity': quantity,
            'pnl': str(pnl),
            'source': source,
            **extra_fields
        }

        message = f"Trade recorded: {quantity} {symbol} pnl={pnl} ({source}) for user {user_id}"
        self.logger.info(message, extra=extra)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = True
) -> Dict[str, Any]:
    """Apply the logging configuration and return the event loggers."""

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    formatter = 'json' if enable_json_logging else 'standard'
    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': StructuredFormatter,
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s'
            }
        },
        'handlers': {
            'console': {
                'level': log_level,
                'class': 'logging.StreamHandler',
                'stream': sys.stdout,
                'formatter': formatter
            }
        },
        'loggers': {
            '': {
                'handlers': ['console'],
                'level': log_level,
            },
            'uvicorn': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            },
            'sqlalchemy': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            },
            'performance': {
                'handlers': ['console'],
                'level': log_level,
                'propagate': False
            },
            'security': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            },
            'business': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False
            }
        }
    }

    if log_file:
        config['handlers']['file'] = {
            'level': log_level,
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': log_file,
            'maxBytes': 10 * 1024 * 1024,  # 10MB
            'backupCount': 5,
            'formatter': formatter
        }

        for logger_config in config['loggers'].values():
            logger_config['handlers'].append('file')

    logging.config.dictConfig(config)

    return {
        'performance': PerformanceLogger(),
        'security': SecurityLogger(),
        'business': BusinessLogger(),
        'main': logging.getLogger('tradelog')
    }


def get_performance_logger() -> PerformanceLogger:
    return PerformanceLogger()


def get_security_logger() -> SecurityLogger:
    return SecurityLogger()


def get_business_logger() -> BusinessLogger:
    return BusinessLogger()


def get_main_logger() -> logging.Logger:
    """Get main application logger."""
    return logging.getLogger('tradelog')
