import logging

LOG_FMT = "%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s"


def setup_logger(name="tradelog", level=logging.INFO):
    logging.basicConfig(level=level, format=LOG_FMT, datefmt="%H:%M:%S")
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger


log = logging.getLogger("tradelog")
