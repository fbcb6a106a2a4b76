"""
GLRM Scoring

Reconstruction of a dataset from fitted factors, one partition at a time.
"""

from .metrics import GLRMMetricBuilder, GLRMModelMetrics
from .reconstruction import ReconstructionTask
from .adapter import ScoringAdapter

__all__ = [
    "GLRMMetricBuilder",
    "GLRMModelMetrics",
    "ReconstructionTask",
    "ScoringAdapter",
]
