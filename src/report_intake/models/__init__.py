"""
数据模型模块
"""

from .event import EventMetadata, FormEvent
from .report import (
    AttachmentMeta,
    AttachmentResolution,
    Classification,
    Complexity,
    ImpactScope,
    Priority,
    ReportType,
    Severity,
    SubmissionRecord,
    Summary,
)
from .result import PipelineResult, ValidationResult

__all__ = [
    "EventMetadata",
    "FormEvent",
    "AttachmentMeta",
    "AttachmentResolution",
    "Classification",
    "Complexity",
    "ImpactScope",
    "Priority",
    "ReportType",
    "Severity",
    "SubmissionRecord",
    "Summary",
    "PipelineResult",
    "ValidationResult",
]
