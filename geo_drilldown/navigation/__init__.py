"""
Drill-down navigation, layer resolution and filter compilation.
"""

from .filter_compiler import FilterCompiler
from .layer_resolver import LayerResolver, BoundarySelection, BoundarySelectionStatus
from .drill_navigator import DrillDownNavigator, DrillResult, DrillStatus
from .cascading_validator import CascadingSelectionValidator, SelectionValidation

__all__ = [
    'FilterCompiler',
    'LayerResolver',
    'BoundarySelection',
    'BoundarySelectionStatus',
    'DrillDownNavigator',
    'DrillResult',
    'DrillStatus',
    'CascadingSelectionValidator',
    'SelectionValidation'
]
