"""Pandera schemas for GEMM problem tables and feature matrices."""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series

from kernelfeatures.problem import ContractionProblem
from kernelfeatures.utils.logging import get_logger

log = get_logger(__name__)


class GemmProblemSchema(pa.DataFrameModel):
    """
    Schema for a table of GEMM problem sizes.

    One row per problem, ``C[batch] (m x n) = A (m x k) @ B (k x n)``.
    """

    m: Series[int] = pa.Field(ge=0, description="Rows of A and C")
    n: Series[int] = pa.Field(ge=0, description="Columns of B and C")
    k: Series[int] = pa.Field(ge=0, description="Reduction length")
    batch: Series[int] | None = pa.Field(
        ge=1,
        description="Number of independent multiplies (default 1)",
    )

    class Config:
        """Schema configuration."""

        name = "GemmProblemSchema"
        strict = False  # Allow extra columns (e.g. measured timings)
        coerce = True


def feature_matrix_schema(names: list[str]) -> pa.DataFrameSchema:
    """
    Build the schema of a feature matrix for a given column layout.

    Args:
        names: Feature column names in layout order.

    Returns:
        Schema requiring exactly those float columns, in order, without nulls.
    """
    return pa.DataFrameSchema(
        {name: pa.Column(float, nullable=False) for name in names},
        name="FeatureMatrixSchema",
        strict=True,
        ordered=True,
    )


def problems_from_frame(df: pd.DataFrame) -> list[ContractionProblem]:
    """
    Validate a GEMM table and convert each row to a problem descriptor.

    Args:
        df: Table with ``m``, ``n``, ``k`` and optionally ``batch`` columns.

    Returns:
        One `ContractionProblem` per row, in row order.

    Raises:
        pandera.errors.SchemaError: If the table does not match the schema.
    """
    validated = GemmProblemSchema.validate(df)
    if "batch" in validated.columns:
        batches = validated["batch"]
    else:
        batches = pd.Series(1, index=validated.index)
    problems = [
        ContractionProblem.from_gemm(m=int(m), n=int(n), k=int(k), batch=int(b))
        for m, n, k, b in zip(
            validated["m"], validated["n"], validated["k"], batches, strict=True
        )
    ]
    log.info("Loaded problems", rows=len(problems))
    return problems
