"""
Feather HTTP API - Public API
=============================
"""

from core.http_api.contracts import (
    ExecuteLogicScriptsHttpRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    LogicScriptCreateHttpRequest,
    LogicScriptDeleteHttpRequest,
    LogicScriptReorderHttpRequest,
    LogicScriptUpdateHttpRequest,
    PriceCartHttpRequest,
    PriceProductsHttpRequest,
    TenantReadRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    ErrorCode,
    error_response,
    http_status_for,
    success_response,
)
from core.http_api.handlers import (
    list_logic_scripts,
    post_execute_logic_scripts,
    post_logic_script_create,
    post_logic_script_delete,
    post_logic_script_reorder,
    post_logic_script_update,
    post_price_cart,
    post_price_products,
)

__all__ = [
    "ErrorCode",
    "ExecuteLogicScriptsHttpRequest",
    "HttpApiDependencies",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "LogicScriptCreateHttpRequest",
    "LogicScriptDeleteHttpRequest",
    "LogicScriptReorderHttpRequest",
    "LogicScriptUpdateHttpRequest",
    "PriceCartHttpRequest",
    "PriceProductsHttpRequest",
    "TenantReadRequest",
    "error_response",
    "http_status_for",
    "list_logic_scripts",
    "post_execute_logic_scripts",
    "post_logic_script_create",
    "post_logic_script_delete",
    "post_logic_script_reorder",
    "post_logic_script_update",
    "post_price_cart",
    "post_price_products",
    "success_response",
]
