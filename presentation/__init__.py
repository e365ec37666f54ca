from .report import format_insight, generate_markdown_table
from .json_api import InsightResponse, InsightListResponse, to_api_response, to_json

__all__ = [
    # Text rendering
    "format_insight",
    "generate_markdown_table",
    # JSON API
    "InsightResponse",
    "InsightListResponse",
    "to_api_response",
    "to_json",
]
