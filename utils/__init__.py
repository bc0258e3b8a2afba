# utils/__init__.py

from .file_operations import (
    save_file,
    save_file_atomic,
    delete_file,
    clean_up_directory,
    load_file_content,
    ensure_directory,
)
from .logging import configure_logging, log_debug, log_info, log_warning, log_error, log_result

__all__ = [
    "save_file",
    "save_file_atomic",
    "delete_file",
    "clean_up_directory",
    "load_file_content",
    "ensure_directory",
    "configure_logging",
    "log_debug",
    "log_info",
    "log_warning",
    "log_error",
    "log_result",
]
