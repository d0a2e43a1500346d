"""
客户回报处理工作流
"""

from .context import PipelineServices, build_services
from .report_workflow import create_report_workflow
from .state import ReportState

__all__ = ["PipelineServices", "build_services", "create_report_workflow", "ReportState"]
