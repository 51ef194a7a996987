"""Speech engine, turn orchestration and device boundaries."""

from .engine import CancellationToken, SpeechEngine, VoiceOutputConfig, map_recognition_error
from .indicator import StatusIndicator, describe_status
from .interfaces import PlatformCapabilities, RecognitionDevice, SpeechUtterance, SynthesisDevice
from .orchestrator import ResponseGenerationError, TurnOrchestrator
from .reconciliation import ReconciledBatch, reconcile_results

__all__ = [
    "CancellationToken",
    "PlatformCapabilities",
    "RecognitionDevice",
    "ReconciledBatch",
    "ResponseGenerationError",
    "SpeechEngine",
    "SpeechUtterance",
    "StatusIndicator",
    "SynthesisDevice",
    "TurnOrchestrator",
    "VoiceOutputConfig",
    "describe_status",
    "map_recognition_error",
    "reconcile_results",
]
