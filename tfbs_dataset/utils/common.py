#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Utilities for TFBS dataset preparation modules."""


from contextlib import suppress
from datetime import timedelta
import functools
import inspect
import logging
import os
from pathlib import Path
import shutil
import sys
import time
from typing import Any, Callable, Optional, Union

from tfbs_dataset.utils.exceptions import CollaboratorFailure


# decorator to track execution time
def time_decorator(print_args: bool = False, display_arg: str = "") -> Callable:
    """Decorator to time functions.

    Args:
        print_args (bool, optional): Whether to print the function arguments.
        Defaults to False. display_arg (str, optional): The argument to display
        in the print statement. Defaults to "".

    Returns:
        Callable: The decorated function.
    """

    def _time_decorator_func(function: Callable) -> Callable:
        @functools.wraps(function)
        def _execute(*args: Any, **kwargs: Any) -> Any:
            start_time = time.monotonic()
            fxn_args = inspect.signature(function).bind(*args, **kwargs).arguments
            result = function(*args, **kwargs)
            end_time = time.monotonic()
            args_to_print = list(fxn_args.values()) if print_args else display_arg
            print(
                f"Finished {function.__name__} {args_to_print} - "
                f"Time: {timedelta(seconds=end_time - start_time)}"
            )
            return result

        return _execute

    return _time_decorator_func


# logging setup
def setup_logging(log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Prepare a logger that prints to stderr with date, time, and module name.
    Optionally writes to a file if a filepath is specified.

    Args:
        log_file (Optional[str]): Path to the log file. If None, logging only
        occurs to stderr.
    """
    # get name of module calling logger
    script_name = os.path.basename(sys.argv[0])
    module_name = os.path.splitext(script_name)[0]

    # create logger
    logger = logging.getLogger(module_name)

    # clear existing handlers to avoid duplication
    if logger.handlers:
        logger.handlers.clear()

    logger.setLevel(logging.INFO)

    # set date, time, and module name format
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # create console handler and set level to INFO
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # create file handler if additional log file specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# file and directory operations
def dir_check_make(dir: Union[str, Path]) -> None:
    """Utility to make directories only if they do not already exist"""
    with suppress(FileExistsError):
        os.makedirs(dir)


def check_file_exists(path: Union[str, Path], description: str) -> Path:
    """Raise FileNotFoundError naming the input if the path is not a file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"{description} not found: {path}")
    return path


# command line operations
def check_bedtools(collaborator: str) -> None:
    """Fail fast if the bedtools binary is not on PATH."""
    if shutil.which("bedtools") is None:
        raise CollaboratorFailure(
            collaborator, "bedtools executable not found on PATH"
        )
