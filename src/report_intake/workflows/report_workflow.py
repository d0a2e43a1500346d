"""
客户回报处理工作流编排

使用 LangGraph 编排线性流程：
字段映射 → 校验 → 标准化 → 附件处理 → AI 摘要 → 问题系统转发 → Discord 通知
"""

from typing import Literal

from langgraph.graph import END, StateGraph

from ..utils.logger import get_logger
from .context import PipelineServices
from .nodes import (
    make_attachment_resolution_node,
    make_field_mapping_node,
    make_issue_forwarding_node,
    make_normalization_node,
    make_notification_node,
    make_summarization_node,
    make_validation_node,
)
from .state import ReportState

logger = get_logger(__name__)


def create_report_workflow(services: PipelineServices):
    """
    创建客户回报处理工作流

    Args:
        services: 节点使用的外部服务

    Returns:
        编译后的工作流应用
    """
    workflow = StateGraph(ReportState)

    workflow.add_node("field_mapping", make_field_mapping_node(services))
    workflow.add_node("validation", make_validation_node(services))
    workflow.add_node("normalization", make_normalization_node(services))
    workflow.add_node("attachment_resolution", make_attachment_resolution_node(services))
    workflow.add_node("summarization", make_summarization_node(services))
    workflow.add_node("issue_forwarding", make_issue_forwarding_node(services))
    workflow.add_node("notification", make_notification_node(services))

    workflow.set_entry_point("field_mapping")
    workflow.add_edge("field_mapping", "validation")

    # 校验失败直接结束，不发起任何外部调用
    workflow.add_conditional_edges(
        "validation",
        _route_by_validation,
        {
            "valid": "normalization",
            "rejected": END,
        },
    )

    workflow.add_edge("normalization", "attachment_resolution")
    workflow.add_edge("attachment_resolution", "summarization")
    workflow.add_edge("summarization", "issue_forwarding")
    workflow.add_edge("issue_forwarding", "notification")
    workflow.add_edge("notification", END)

    app = workflow.compile()
    logger.info("客户回报处理工作流编译成功")
    return app


def _route_by_validation(state: ReportState) -> Literal["valid", "rejected"]:
    """
    根据校验结果路由

    Args:
        state: 工作流状态

    Returns:
        路由目标
    """
    if state.get("validation_errors"):
        return "rejected"
    return "valid"
