"""
API Schemas 模块
"""

from .request import ReportSubmitRequest
from .response import (
    HealthCheckResponse,
    ReportAcceptedData,
    ReportAcceptedResponse,
    ReportResultResponse,
)

__all__ = [
    "ReportSubmitRequest",
    "ReportAcceptedData",
    "ReportAcceptedResponse",
    "ReportResultResponse",
    "HealthCheckResponse",
]
