"""Flask application factory for the zakat engine.

The application carries no routes. It loads zakat settings, builds the price
cache and exposes both to the facade (zakat_engine.facade) and the
``flask zakat`` CLI commands.
"""
import logging
import os

from flask import Flask

from zakat_engine.services.cache import build_cache
from zakat_engine.services.config import load_config


logger = logging.getLogger('zakat_engine')


def create_app(config: dict | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary to override defaults.
            Zakat settings go under the ``ZAKAT`` key as a nested dict.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration
    app.config.update(
        DATA_DIR=os.environ.get('DATA_DIR', os.path.join(os.path.dirname(__file__), '..', 'data')),
        ZAKAT_CONFIG_FILE=os.environ.get('ZAKAT_CONFIG_FILE'),
        ZAKAT={},
    )

    # Override with provided config
    if config:
        app.config.update(config)

    init_app(app)

    # Register CLI commands
    from zakat_engine import cli
    cli.register_cli(app)

    return app


def init_app(app: Flask) -> None:
    """Attach zakat settings and the price cache to an existing app."""
    settings = load_config(app.config.get('ZAKAT_CONFIG_FILE'), app.config.get('ZAKAT'))
    backend = settings.get('cache.backend', 'memory')
    cache = build_cache(backend, data_dir=app.config.get('DATA_DIR'))

    app.extensions['zakat'] = {
        'config': settings,
        'cache': cache,
    }
    logger.info(f"Zakat engine ready (cache backend: {backend})")
