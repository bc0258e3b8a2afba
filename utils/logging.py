import logging
from colorama import Fore, Style

# Глобальная настройка для управления логами
verbose_mode = False
quiet_mode = False

logger = logging.getLogger("pgpverify")

STATUS_COLORS = {
    "DEBUG": Fore.WHITE,
    "INFO": Fore.CYAN,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
}


def configure_logging(verbose=False, quiet=False):
    """
    Configures logging based on the verbosity and quiet flags.

    The coloured console lines are the command line output; the "pgpverify"
    logger no longer propagates to the root logger so nothing is printed twice.
    """
    global verbose_mode, quiet_mode
    verbose_mode = verbose
    quiet_mode = quiet
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = False


def log_status(level, message):
    """
    Logs a message with a specific level and color.
    Debug output is printed only in verbose mode, info output is suppressed in quiet mode.
    """
    if level == "DEBUG" and not verbose_mode:
        logger.debug(message)
        return
    if level == "INFO" and quiet_mode:
        logger.info(message)
        return

    color = STATUS_COLORS.get(level, Fore.WHITE)
    print(f"{color}[{level}]{Style.RESET_ALL} {message}")
    logger.log(getattr(logging, level), message)


def log_debug(message):
    log_status("DEBUG", message)

def log_info(message):
    log_status("INFO", message)

def log_warning(message):
    log_status("WARNING", message)

def log_error(message):
    log_status("ERROR", message)

def log_result(message):
    """
    Logs a successful verification line; demoted to debug in quiet mode.
    """
    if quiet_mode:
        log_debug(message)
    else:
        log_info(message)
