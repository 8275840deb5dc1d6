import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app):
    """Liga o logger do pacote ``escola`` no nível definido em LOG_LEVEL."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    logger = logging.getLogger("escola")
    logger.setLevel(level)

    if not any(getattr(h, "_escola", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._escola = True
        logger.addHandler(handler)

    logger.propagate = False
    return logger
