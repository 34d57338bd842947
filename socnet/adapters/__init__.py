"""Conversions between SocNet and other graph/table representations.

``networkx_adapter`` needs the optional ``networkx`` dependency and is not
imported here.
"""

from .dataframe_adapter import from_dataframes, to_dataframes

__all__ = ["from_dataframes", "to_dataframes"]
