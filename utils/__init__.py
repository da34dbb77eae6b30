"""
Utils package - Shared utility functions.
"""

from utils.logger import setup_logging, setup_logging_from_settings
from utils.throttle import Throttle

__all__ = ['setup_logging', 'setup_logging_from_settings', 'Throttle']
