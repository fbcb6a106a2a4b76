"""
GLRM Data Structures

Table adaptation (categorical-first layout, domains, numeric transforms) and
row partitioning of the loading frame.
"""

from .glrm_data import GLRMData, TRANSFORMS, is_categorical
from .partition import Partition, partition_bounds, make_loading_frame, partition_frame

__all__ = [
    # Table adaptation
    "GLRMData",
    "TRANSFORMS",
    "is_categorical",
    # Partitions
    "Partition",
    "partition_bounds",
    "make_loading_frame",
    "partition_frame",
]
