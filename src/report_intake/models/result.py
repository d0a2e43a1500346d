"""
校验与流水线结果模型
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """校验结果"""

    is_valid: bool = Field(..., description="是否通过校验")
    errors: List[str] = Field(default_factory=list, description="全部错误信息")


class PipelineResult(BaseModel):
    """单次提交的处理结果"""

    status: Literal["delivered", "rejected", "failed"] = Field(
        ..., description="delivered=已通知, rejected=校验失败, failed=处理失败"
    )
    ticket_id: Optional[str] = Field(None, description="工单编号")
    validation_errors: List[str] = Field(default_factory=list)
    attachment_errors: List[str] = Field(default_factory=list)
    summary_fallback: bool = Field(False, description="是否使用了替代摘要")
    alert_sent: bool = Field(False, description="是否已通知管理员")
    error: Optional[str] = Field(None, description="错误信息")
