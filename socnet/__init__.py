# socnet/__init__.py
"""socnet: social network analysis engine, single import."""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    "adapters": "socnet.adapters",
    "core": "socnet.core",
    "algorithms": "socnet.algorithms",
    "config": "socnet.config",
    "networkx": "socnet.adapters.networkx_adapter",
    "dataframe": "socnet.adapters.dataframe_adapter",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "SocNet": ("socnet.core.graph", "SocNet"),
    "AnalysisOptions": ("socnet.core._helpers", "AnalysisOptions"),
    "EdgeType": ("socnet.core._helpers", "EdgeType"),
    "GraphChange": ("socnet.core._helpers", "GraphChange"),
    "UNDEFINED": ("socnet.core._helpers", "UNDEFINED"),
    "is_undefined": ("socnet.core._helpers", "is_undefined"),
    # Errors
    "SocNetError": ("socnet.core._errors", "SocNetError"),
    "NotFoundError": ("socnet.core._errors", "NotFoundError"),
    "InvalidParameterError": ("socnet.core._errors", "InvalidParameterError"),
    "SingularMatrixError": ("socnet.core._errors", "SingularMatrixError"),
    "UnsupportedError": ("socnet.core._errors", "UnsupportedError"),
    # Config
    "Settings": ("socnet.config", "Settings"),
    "get_settings": ("socnet.config", "get_settings"),
    # Matrices
    "VertexMatrix": ("socnet.algorithms.matrices", "VertexMatrix"),
    "invert_matrix": ("socnet.algorithms.matrices", "invert_matrix"),
    "determinant": ("socnet.algorithms.matrices", "determinant"),
    # Traversal
    "Connectedness": ("socnet.algorithms.traversal", "Connectedness"),
    # NetworkX adapter (optional dependency)
    "to_nx": ("socnet.adapters.networkx_adapter", "to_nx"),
    "from_nx": ("socnet.adapters.networkx_adapter", "from_nx"),
    # DataFrames
    "to_dataframes": ("socnet.adapters.dataframe_adapter", "to_dataframes"),
    "from_dataframes": ("socnet.adapters.dataframe_adapter", "from_dataframes"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))

try:
    __version__ = _pkg_version("socnet")
except PackageNotFoundError:
    __version__ = "0.0.0"


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))
