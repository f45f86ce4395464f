"""Scan step: the abstract scanner contract and its timed simulation."""

from .base import ScanHandle, ScanState, Scanner
from .process import ScanProcess, ScanRun

__all__ = [
    "ScanHandle",
    "ScanState",
    "Scanner",
    "ScanProcess",
    "ScanRun",
]
