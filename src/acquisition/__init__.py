"""Download, extraction and caching of JDK distributions."""

from .cache import LocalCache
from .config import AcquisitionConfig
from .downloader import Downloader
from .extractor import Extractor, locate_jdk_home
from .orchestrator import AcquisitionOrchestrator
from .retry import AttemptResult, RetryPolicy, run_with_retry

__all__ = [
    "AcquisitionConfig",
    "AcquisitionOrchestrator",
    "AttemptResult",
    "Downloader",
    "Extractor",
    "LocalCache",
    "RetryPolicy",
    "locate_jdk_home",
    "run_with_retry",
]
