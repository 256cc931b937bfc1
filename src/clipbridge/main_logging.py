"""Logging configuration for clipbridge CLI."""
import logging


def configure_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity setting.

    Args:
        verbose: If True, set DEBUG level and prefix each line with the
            time and logger name; otherwise WARNING level with the bare
            "LEVEL: message" format.

    Connection loss and startup failures are always printed to stderr;
    dropped or rejected messages only show up with --verbose.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s" if verbose
        else "%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )
