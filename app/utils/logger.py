import logging

logger = logging.getLogger("incentive")


def get_logger(name: str):
    return logger.getChild(name)
