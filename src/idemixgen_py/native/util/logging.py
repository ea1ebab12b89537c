from rich.console import Console
from rich.logging import RichHandler
import logging

# Constants
LOGGING_FORMAT = "%(message)s"
LOGGING_DATEFMT = "[%X]"

# Configure logging, keeping stdout for command output
logging.basicConfig(
    level=logging.INFO,
    format=LOGGING_FORMAT,
    datefmt=LOGGING_DATEFMT,
    handlers=[RichHandler(console=Console(stderr=True))],
)

logger = logging.getLogger("idemixgen")
