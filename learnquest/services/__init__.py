"""
Service Layer Package

- ProgressionEngine: optimistic progress mutations with asynchronous write-back
- LearnerSession: per-learner wiring of store and engine
"""

from learnquest.services.progress_service import ProgressionEngine, WriteStatus
from learnquest.services.session import LearnerSession

__all__ = [
    "ProgressionEngine",
    "WriteStatus",
    "LearnerSession",
]
