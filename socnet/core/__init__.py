from ._errors import (
    InvalidParameterError,
    NotFoundError,
    SingularMatrixError,
    SocNetError,
    UnsupportedError,
)
from ._helpers import UNDEFINED, AnalysisOptions, EdgeType, GraphChange, is_undefined
from ._Store import Tie, Vertex
from .graph import SocNet

__all__ = [
    "UNDEFINED",
    "AnalysisOptions",
    "EdgeType",
    "GraphChange",
    "InvalidParameterError",
    "NotFoundError",
    "SingularMatrixError",
    "SocNet",
    "SocNetError",
    "Tie",
    "UnsupportedError",
    "Vertex",
    "is_undefined",
]
