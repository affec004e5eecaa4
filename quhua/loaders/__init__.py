"""Record loaders for quhua."""

from quhua.loaders.base import BaseLoader, LoaderError, LoaderRegistry
from quhua.loaders.csv_loader import CSVRegionLoader

__all__ = [
    "BaseLoader",
    "CSVRegionLoader",
    "LoaderError",
    "LoaderRegistry",
]
