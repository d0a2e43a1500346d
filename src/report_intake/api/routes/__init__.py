"""
API 路由模块
"""

from .report import router as report_router

__all__ = ["report_router"]
