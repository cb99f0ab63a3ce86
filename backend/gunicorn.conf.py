"""
Gunicorn Configuration for ISC DHCP Scope Converter
"""

import logging
from config_manager import ConfigManager

# Server socket
bind = "127.0.0.1:5000"

# Worker processes
workers = 3
worker_class = "sync"
timeout = 120

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr

wsgi_app = "app:create_app()"


def on_starting(server):
    """
    Called once when Gunicorn master process starts.
    This is the ideal place for one-time startup logging.
    """
    try:
        config = ConfigManager().load()

        log_level = config.get('LOG_LEVEL', 'INFO').upper()
        numeric_level = getattr(logging, log_level, logging.INFO)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        logger = logging.getLogger('dhcp-converter-early-startup')
        logger.setLevel(numeric_level)
        logger.addHandler(console_handler)

        # Log startup information once
        logger.info("=" * 60)
        logger.info("ISC DHCP Scope Converter starting")
        logger.info(f"Workers: {workers}")
        logger.info(f"Bind: {bind}")
        logger.info(f"Worker class: {worker_class}")
        logger.info(f"Timeout: {timeout}s")
        logger.info(f"Log level: {log_level}")
        logger.info(f"Log path: {config.get('LOGGING_PATH')}")
        logger.info(f"DHCP config path: {config.get('DHCP_CONFIG_PATH')}")
        logger.info(f"API prefix: {config.get('API_PREFIX')}")
        logger.info(f"CORS origins: {config.get('CORS_ORIGINS')}")
        logger.info("=" * 60)
    except Exception as e:
        # Fallback to basic logging if config fails
        logging.basicConfig(level=logging.INFO)
        logging.error(f"Failed to load configuration during startup: {e}")
