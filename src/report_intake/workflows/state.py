"""
LangGraph 工作流状态定义
"""

from typing import List, Optional
from typing_extensions import TypedDict

from ..models import AttachmentResolution, FormEvent, SubmissionRecord, Summary


class ReportState(TypedDict, total=False):
    """
    客户回报处理工作流状态

    每次提交独立创建，处理结束即丢弃
    """

    # ============ 输入 ============
    event: FormEvent
    """表单提交事件"""

    # ============ 处理过程 ============
    record: SubmissionRecord
    """提交记录（映射后 / 标准化后）"""

    validation_errors: List[str]
    """校验错误，非空时流程终止"""

    attachments: AttachmentResolution
    """附件处理结果"""

    summary: Summary
    """AI 摘要或替代摘要"""

    summary_error: Optional[str]
    """AI 摘要失败原因（使用替代摘要时）"""

    issue_error: Optional[str]
    """问题系统转发失败原因"""

    # ============ 通知 ============
    delivered: bool
    """Webhook 是否投递成功"""

    delivery_error: Optional[str]
    """投递失败原因"""

    delivery_status: Optional[int]
    """投递失败时的 HTTP 状态码"""

    current_node: Optional[str]
    """当前处理节点"""
