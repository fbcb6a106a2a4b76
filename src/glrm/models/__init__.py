"""
GLRM Models

Model configuration and the fitted model.
"""

from .params import GLRMParameters
from .glrm_model import GLRMModel, GLRMOutput

__all__ = [
    "GLRMParameters",
    "GLRMModel",
    "GLRMOutput",
]
