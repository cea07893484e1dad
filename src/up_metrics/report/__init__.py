from __future__ import annotations

from .formatter import format_metric, format_tvl_table, to_json

__all__ = ["format_metric", "format_tvl_table", "to_json"]
