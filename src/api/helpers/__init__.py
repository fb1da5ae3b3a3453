"""API helper utilities."""
from api.helpers.results import error_detail, gateway_http_error, unwrap

__all__ = [
    "error_detail",
    "gateway_http_error",
    "unwrap",
]
