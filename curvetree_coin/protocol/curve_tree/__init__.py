"""
Curve-tree membership accumulator over the Pallas/Vesta cycle.
"""

from .parameters import RerandomizationTable, SelRerandParameters, SingleLayerParameters
from .permissible import UniversalHash, permissible_commitment
from .rerandomize import (
    permissible_point_gadget,
    rerandomize_gadget,
    single_level_select_and_rerandomize,
)
from .tree import (
    CurveTree,
    SelectAndRerandomizePath,
    expected_path_lengths,
    select_and_rerandomize_verifier_gadget,
)

__all__ = [
    "CurveTree",
    "RerandomizationTable",
    "SelRerandParameters",
    "SelectAndRerandomizePath",
    "SingleLayerParameters",
    "UniversalHash",
    "expected_path_lengths",
    "permissible_commitment",
    "permissible_point_gadget",
    "rerandomize_gadget",
    "select_and_rerandomize_verifier_gadget",
    "single_level_select_and_rerandomize",
]
