"""
Schema definitions using Pandera for tabular input and output.

Problem tables enter through `GemmProblemSchema`; feature matrices leave
through a schema built for the layout that produced them.
"""

from kernelfeatures.schemas.problems import (
    GemmProblemSchema,
    feature_matrix_schema,
    problems_from_frame,
)

__all__ = [
    "GemmProblemSchema",
    "feature_matrix_schema",
    "problems_from_frame",
]
