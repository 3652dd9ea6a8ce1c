"""Common utilities for termchat front ends."""
from .config import get_config, configure_logger, load_config

__all__ = ['get_config', 'configure_logger', 'load_config']
