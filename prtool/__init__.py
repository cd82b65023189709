import logging
import os
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("prtool")
except PackageNotFoundError:
    # Running from a source checkout that was never installed
    __version__ = "0.0.0-dev"

# Configure logging on package import; the summarize command reconfigures it from user settings
log_level = os.environ.get("PRTOOL_LOG_LEVEL", os.environ.get("LOG_LEVEL", "WARNING")).upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.WARNING),
    format="%(levelname)s:%(name)s:%(message)s",
    force=True,
)
