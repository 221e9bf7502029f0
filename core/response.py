"""
Standardized API response envelopes
"""
from typing import Any, Dict, Optional
from datetime import datetime


def success_response(
    data: Any = None,
    message: str = "Operation successful",
    meta: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create a success response"""
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": meta,
        "timestamp": datetime.utcnow().isoformat()
    }


def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create an error response"""
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": datetime.utcnow().isoformat()
    }


def list_response(
    data: list,
    limit: int,
    offset: int,
    message: str = "Data retrieved successfully"
) -> Dict[str, Any]:
    """Create a limit/offset list response"""
    return success_response(
        data=data,
        message=message,
        meta={
            "limit": limit,
            "offset": offset,
            "count": len(data)
        }
    )
