import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union


def logger_formatter() -> logging.Formatter:
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%d-%m-%Y %I:%M:%S %p",
    )
    return formatter


def handler_stream(formatter: logging.Formatter, verbose: bool = False) -> logging.StreamHandler:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    return console_handler


def handler_file(path: Union[str, Path], formatter: logging.Formatter) -> logging.FileHandler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    return file_handler


def handler_supervisor_stdout(formatter: logging.Formatter) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def handler_supervisor_stderr(formatter: logging.Formatter) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.WARNING)
    handler.setFormatter(formatter)
    return handler


def running_under_supervisord() -> bool:
    return any(
        key in os.environ
        for key in [
            "SUPERVISOR_PROCESS_NAME",
            "SUPERVISOR_ENABLED",
            "SUPERVISOR_GROUP_NAME",
        ]
    )


def setup_logging(path: Optional[Union[str, Path]] = None, verbose: bool = False) -> None:
    """Consola siempre; archivo solo si se indica `path`."""
    formatter = logger_formatter()

    if running_under_supervisord():
        handlers = [
            handler_supervisor_stdout(formatter),
            handler_supervisor_stderr(formatter),
        ]
    else:
        handlers = [handler_stream(formatter, verbose)]
        if path is not None:
            handlers.append(handler_file(path, formatter))

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        force=True,
    )

    # Silenciar loggers de librerías de terceros
    for lib_name in ["urllib3", "requests", "charset_normalizer"]:
        logging.getLogger(lib_name).setLevel(logging.WARNING)
