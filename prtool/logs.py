import logging

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CI_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def configure_logging(verbose: bool = False, ci: bool = False, log_file: str = "") -> None:
    """Reconfigure logging for a run.

    Verbose mode logs prtool's informational messages, CI mode drops
    timestamps and a log file, when given, receives the records instead of
    stderr.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format=CI_FORMAT if ci else DEFAULT_FORMAT,
        filename=log_file or None,
        filemode="a",
        encoding="utf-8",
        force=True,
    )
    logging.getLogger("prtool").setLevel(logging.INFO if verbose else logging.WARNING)
