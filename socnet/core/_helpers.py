from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import polars as pl

# Sentinel for metrics that are not defined for a vertex (empty reachable set,
# zero variance, ...). Unreachable distances use math.inf instead.
UNDEFINED = math.nan


def is_undefined(x) -> bool:
    return x is None or (isinstance(x, float) and math.isnan(x))


class EdgeType(Enum):
    DIRECTED = "DIRECTED"
    RECIPROCATED = "RECIPROCATED"
    UNDIRECTED = "UNDIRECTED"


class GraphChange(Enum):
    """Classes of modification announced through ``graph_modified`` events."""

    METADATA = "metadata"
    POSITIONS = "positions"
    VERTICES = "vertices"
    EDGES = "edges"
    VERTICES_EDGES = "vertices_edges"
    RELATION = "relation"
    NEW = "new"

    @property
    def structural(self) -> bool:
        return self not in (GraphChange.METADATA, GraphChange.POSITIONS)


@dataclass(frozen=True)
class AnalysisOptions:
    """How ties are read by traversal, matrix and centrality routines.

    Parameters
    --
    weighted : bool
        Use tie weights instead of 1 for every tie.
    inverse_weights : bool
        Only with ``weighted``: read a tie of weight w as cost ``1/w`` so that
        stronger ties are shorter.
    drop_isolates : bool
        Exclude vertices without any visible tie from every sum, average and
        normalization denominator.

    Notes
    -
    Instances are hashable and are used as cache keys.

    """

    weighted: bool = False
    inverse_weights: bool = False
    drop_isolates: bool = False

    @classmethod
    def coerce(cls, options=None, **overrides) -> AnalysisOptions:
        """Build options from an existing instance and/or keyword overrides."""
        base = options if options is not None else cls()
        if not isinstance(base, cls):
            raise TypeError(f"expected AnalysisOptions, got {type(base).__name__}")
        overrides = {k: bool(v) for k, v in overrides.items() if v is not None}
        if not overrides:
            return base
        return cls(
            weighted=overrides.get("weighted", base.weighted),
            inverse_weights=overrides.get("inverse_weights", base.inverse_weights),
            drop_isolates=overrides.get("drop_isolates", base.drop_isolates),
        )

    def cost(self, weight: float) -> float:
        if not self.weighted:
            return 1.0
        if self.inverse_weights:
            return 1.0 / weight
        return weight


def nan_to_null(df: pl.DataFrame) -> pl.DataFrame:
    """Replace float NaN (undefined values) with nulls for export."""
    float_cols = [c for c, dt in zip(df.columns, df.dtypes) if dt.is_float()]
    if not float_cols:
        return df
    return df.with_columns([pl.col(c).fill_nan(None) for c in float_cols])


def build_dataframe_from_rows(rows, schema=None) -> pl.DataFrame:
    if not rows:
        return pl.DataFrame(schema=schema or {})
    return nan_to_null(pl.DataFrame(rows, schema=schema, strict=False))
