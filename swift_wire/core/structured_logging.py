"""
swift-wire - Structured Logging

JSON-lines log formatting and dictConfig-based setup for the command line
tools. Library modules only ever call ``logging.getLogger(__name__)``; the
handlers are installed here by the entry points.
"""

import logging
import logging.config
import json
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, TextIO


class LogCategory(Enum):
    """Log categories for filtering and routing."""
    SYSTEM = "system"
    ENCODING = "encoding"
    NETWORK_WRAP = "network_wrap"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"


@dataclass
class LogEvent:
    """Structured log event."""
    timestamp: float
    level: str
    category: LogCategory
    message: str
    component: str
    exception: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'timestamp': self.timestamp,
            'iso_timestamp': datetime.fromtimestamp(self.timestamp, timezone.utc).isoformat(),
            'level': self.level,
            'category': self.category.value,
            'message': self.message,
            'component': self.component,
            'metadata': self.metadata
        }

        if self.exception:
            result['exception'] = {
                'type': type(self.exception).__name__,
                'message': str(self.exception),
                'traceback': traceback.format_exception(
                    type(self.exception), self.exception, self.exception.__traceback__
                )
            }

        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        category = getattr(record, 'category', LogCategory.SYSTEM)
        if not isinstance(category, LogCategory):
            category = LogCategory(category)

        log_event = LogEvent(
            timestamp=record.created,
            level=record.levelname,
            category=category,
            message=record.getMessage(),
            component=getattr(record, 'component', record.name),
            exception=record.exc_info[1] if record.exc_info else None,
            metadata=getattr(record, 'metadata', {}) or {}
        )

        return log_event.to_json()


SIMPLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_logging_config(level: str = 'INFO', json_format: bool = False) -> Dict[str, Any]:
    """Build a dictConfig mapping for the swift_wire loggers."""
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'structured': {
                '()': StructuredFormatter,
            },
            'simple': {
                'format': SIMPLE_FORMAT
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': level,
                'formatter': 'structured' if json_format else 'simple',
                'stream': 'ext://sys.stderr'
            }
        },
        'loggers': {
            'swift_wire': {
                'level': level,
                'handlers': ['console'],
                'propagate': False
            }
        },
        'root': {
            'level': 'WARNING',
            'handlers': ['console']
        }
    }


def configure_logging(
    level: str = 'INFO',
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure the logging system."""
    logging_config = build_logging_config(level.upper(), json_format)

    logging.config.dictConfig(logging_config)

    # dictConfig only accepts ext:// references for streams
    if stream is not None and stream is not sys.stderr:
        for handler in logging.getLogger('swift_wire').handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(stream)
