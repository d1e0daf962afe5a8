"""journal2graylog public API."""

from .api import build_shipper, configure, run
from .version import __version__

__all__ = [
    "configure",
    "build_shipper",
    "run",
    "__version__",
]
