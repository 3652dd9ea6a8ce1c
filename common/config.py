#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
from pathlib import Path

from termchat.color import Palette
from termchat.error import ConfigError
from termchat.network import client_class


DEFAULT_CONFIG_FILE = 'termchat.json'
DEFAULT_LOG_FILE = 'termchat.log'
DEFAULT_CLIENT = 'termchat.network:LoopbackClient'
LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # EINVAL on a Windows handle in an inconsistent state
            if e.errno != 22:
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, (str, Path)):
        handler = RobustFileHandler(
            str(log_file),
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)

    handler.setFormatter(logging.Formatter(log_format))

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def load_config(path):
    """Read a JSON configuration file

    Args:
        path: Path to the file. A missing file yields an empty config.

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: The file is not a JSON object
    """
    path = Path(path)
    if not path.exists():
        logging.getLogger(__name__).warning(
            'config file %s not found, using defaults', path)
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            conf = json.load(fp)
    except json.JSONDecodeError as ex:
        raise ConfigError('%s: %s' % (path, ex)) from ex
    if not isinstance(conf, dict):
        raise ConfigError('%s: expected a JSON object' % path)
    return conf


def get_log_level(conf):
    name = str(conf.get('log_level', 'info')).upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        raise ConfigError('invalid log_level %r' % conf.get('log_level'))
    return level


def get_config(path=DEFAULT_CONFIG_FILE):
    """Load configuration and build the session parameters

    Args:
        path: Path to the JSON configuration file

    Returns:
        Tuple of (conf, kwargs) where:
            conf: Full configuration dictionary
            kwargs: Session initialization parameters (minus the screen)
    """
    conf = load_config(path)

    # The terminal belongs to the UI, so logs go to a file
    configure_logger(
        logging.getLogger(),
        conf.get('log_file', DEFAULT_LOG_FILE),
        LOG_FORMAT,
        get_log_level(conf)
    )

    server = conf.get('server', {})
    network_cls = client_class(conf.get('network', {}).get('client', DEFAULT_CLIENT))
    try:
        port = int(server.get('port', 6667))
    except (TypeError, ValueError) as ex:
        raise ConfigError('invalid server port %r' % server.get('port')) from ex

    network = network_cls(
        host=server.get('host', 'localhost'),
        port=port,
        nick=server.get('nick', 'termchat'),
        password=server.get('password', None),
        ssl=bool(server.get('ssl', False))
    )

    return conf, {
        'network': network,  # Outbound network client
        'palette': Palette(conf.get('colors', None)),  # Named colors
        'nick': network.nick,
        'auto_connect': bool(conf.get('auto_connect', False)),
    }
