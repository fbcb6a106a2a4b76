"""
GLRM Optimization

Proximal operators used inside the (external) alternating-minimization
driver:
- proximal.py: soft thresholding, random-tie argmax, Chen-Ye simplex projection
- prox_update.py: independent per-row / per-column proximal steps, in parallel
"""

from .proximal import soft_threshold, max_index, project_simplex
from .prox_update import prox_rows, prox_columns, row_rng

__all__ = [
    'soft_threshold',
    'max_index',
    'project_simplex',
    'prox_rows',
    'prox_columns',
    'row_rng',
]
