from .schema import AttemptRecord
from .result_manager import AttemptSink, ResultManager, build_attempt

__all__ = ["AttemptRecord", "AttemptSink", "ResultManager", "build_attempt"]
