import os
import shutil
import tempfile
from utils.logging import log_debug, log_warning


def save_file(file_name, content):
    """
    Saves content to a file with the specified name.
    Raises ValueError for empty content.
    """
    if not content:
        log_warning(f"[Save File] Attempted to save empty content to {file_name}")
        raise ValueError(f"Empty content provided for {file_name}")

    with open(file_name, 'wb') as file:
        file.write(content)


def save_file_atomic(file_name, content):
    """
    Saves content so that readers never observe a partially written file.

    The content is written to a temporary file in the target directory and then
    moved over the target with os.replace, so concurrent writers of the same
    content simply replace each other.
    """
    if not content:
        log_warning(f"[Save File] Attempted to save empty content to {file_name}")
        raise ValueError(f"Empty content provided for {file_name}")

    directory = os.path.dirname(os.path.abspath(file_name))
    fd, temp_name = tempfile.mkstemp(dir=directory, prefix=".part-", suffix=".tmp")
    try:
        with os.fdopen(fd, 'wb') as file:
            file.write(content)
        os.replace(temp_name, file_name)
    except BaseException:
        delete_file(temp_name)
        raise
    log_debug(f"[Save File] Stored {len(content)} bytes in {file_name}")


def delete_file(file_name):
    """
    Deletes a file if it exists.

    :param file_name: The name of the file to delete.
    """
    if os.path.exists(file_name):
        os.remove(file_name)


def clean_up_directory(path):
    """
    Removes a working directory with everything downloaded into it.
    """
    if os.path.isdir(path):
        shutil.rmtree(path, ignore_errors=True)
        log_debug(f"[Clean Up] Removed working directory {path}")


def is_file_present(file_name):
    """
    Checks if a file exists.

    :param file_name: The name of the file to check.
    :return: True if the file exists, False otherwise.
    """
    return os.path.isfile(file_name)


def load_file_content(file_name):
    """
    Reads the content of a file if it exists.

    :param file_name: The name of the file to read.
    :return: The content of the file as bytes, or None if the file does not exist.
    """
    if is_file_present(file_name):
        with open(file_name, 'rb') as file:
            return file.read()
    return None


def ensure_directory(path):
    """
    Creates the directory (with parents) when missing.
    Raises NotADirectoryError when the path exists and is not a directory.
    """
    if os.path.exists(path) and not os.path.isdir(path):
        raise NotADirectoryError(path)
    os.makedirs(path, exist_ok=True)
