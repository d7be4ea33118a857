"""
Emissions core library containing logging helper functionality
"""

import logging


class NoDebugFilter(logging.Filter):
    """
    Drop DEBUG records of the named logger (and its children), but keep everything else

    This filter is attached to the console handler, so that the SQL
    statements echoed by SQLAlchemy only end up in the log file.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno > logging.DEBUG or not super().filter(record)
