import logging
import sys

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogRecordExporter

from .config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure OpenTelemetry logging with a console exporter.

    Args:
        level: Log level name. Defaults to settings.LOG_LEVEL.
    """
    level = (level or settings.LOG_LEVEL).upper()

    logger_provider = LoggerProvider()
    console_exporter = ConsoleLogRecordExporter()
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(console_exporter))

    set_logger_provider(logger_provider)

    # Route standard logging calls through OTel
    handler = LoggingHandler(level=getattr(logging, level), logger_provider=logger_provider)

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)

    # Plain stream handler so output is immediate while batches are pending
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(stream_handler)

    # Silence noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


logger = logging.getLogger("notary")
