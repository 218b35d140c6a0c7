import logging

logger = logging.getLogger(__name__)

NO_TOOL = "-"
ROOT_LOGGER_LABEL = "webpilot"


class ToolLogFilter(logging.Filter):
    """
    Fill in the ``tool_name`` column of the webpilot log format.

    Browser tools log with ``extra={"tool_name": ...}``. Records from the
    runner or from libraries such as playwright carry no tool, so they
    show ``-`` in that column. Records emitted on the root
    logger are labelled ``webpilot`` instead of ``root``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        tool_name = getattr(record, "tool_name", None)
        record.tool_name = NO_TOOL if tool_name is None else str(tool_name)

        if record.name in ("", "root"):
            record.name = ROOT_LOGGER_LABEL

        return True


def init_logging(
    level: int = logging.INFO, clear_existing_handlers: bool = True
) -> None:
    """
    Sets up a standardized console logging configuration for automation runs.

    Args:
        level: The desired logging level for the root logger (e.g., logging.INFO, logging.DEBUG).
        clear_existing_handlers: If True, removes any handlers already attached to the
                                 root logger, preventing duplicate output when called twice.
    """
    root_logger = logging.getLogger()

    if clear_existing_handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s] [%(tool_name)s] %(message)s"
    )
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(ToolLogFilter())

    root_logger.addHandler(stream_handler)
    root_logger.setLevel(level)

    logging.getLogger(__name__).info(
        f"Logging setup complete. Root logger level set to {logging.getLevelName(level)}."
    )
