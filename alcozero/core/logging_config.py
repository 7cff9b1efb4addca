import logging
import sys
import os
from typing import Optional

class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name, logger name and message"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[1;91m',   # Bright Red Bold
        'CRITICAL': '\033[1;95m', # Bright Magenta Bold
        'RESET': '\033[0m'
    }
    NAME_COLOR = '\033[94m'  # Light blue

    def __init__(self, format_string: str, use_colors: bool = True):
        super().__init__()
        self.use_colors = self._should_use_colors(use_colors)
        self.format_string = format_string
        self._plain = logging.Formatter(format_string)

    def _should_use_colors(self, use_colors: bool) -> bool:
        if not use_colors:
            return False

        if os.environ.get('NO_COLOR', '').lower() in ('1', 'true', 'yes'):
            return False

        if os.environ.get('FORCE_COLOR', '').lower() in ('1', 'true', 'yes'):
            return True

        if os.environ.get('TERM') == 'dumb':
            return False

        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def format(self, record):
        if not self.use_colors:
            return self._plain.format(record)

        level_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        colored_format = (
            self.format_string
            .replace('%(levelname)s', f'{level_color}%(levelname)s{reset_color}')
            .replace('%(name)s', f'{self.NAME_COLOR}%(name)s{reset_color}')
            .replace('%(message)s', f'{level_color}%(message)s{reset_color}')
        )
        return logging.Formatter(colored_format).format(record)

def setup_logging(
    log_level: Optional[str] = None,
    format_string: Optional[str] = None,
    force_configure: bool = False,
    use_colors: bool = True
) -> None:
    """
    Configure the root logger with a single coloured console handler.

    LOG_LEVEL from the environment wins when no level is passed. Existing
    handlers are only replaced when ``force_configure`` is set or the root
    logger has none yet.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    if format_string is None:
        format_string = (
            '%(asctime)s │ %(name)-24s │ %(levelname)-8s │ '
            '[%(filename)s:%(lineno)d] │ %(message)s'
        )

    root_logger = logging.getLogger()

    if force_configure or not root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        numeric_level = getattr(logging, log_level, logging.INFO)
        root_logger.setLevel(numeric_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ColoredFormatter(format_string, use_colors=use_colors))
        root_logger.addHandler(console_handler)

        root_logger.debug("Logging configured at level %s", log_level)

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger that defers to the root handler.
    """
    logger = logging.getLogger(name)
    logger.handlers = []
    logger.propagate = True
    return logger
