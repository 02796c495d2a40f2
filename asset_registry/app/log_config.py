import logging.config


def configure_logging(level='INFO'):
    """Route the package's loggers (and Flask's) to the console."""
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
            },
        },
        'loggers': {
            'asset_registry': {
                'handlers': ['console'],
                'level': level,
                'propagate': False,
            },
        },
    })
