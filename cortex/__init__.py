"""
cortex - coding-convention rules installer
"""

__version__ = "0.1.0"

from cortex.cli import cli
from cortex.core.detector import DetectionResult, LanguageDetector
from cortex.core.errors import CortexError
from cortex.core.sync import RuleSyncEngine, SyncReport

__all__ = [
    "cli",
    "CortexError",
    "DetectionResult",
    "LanguageDetector",
    "RuleSyncEngine",
    "SyncReport",
]
