"""
AI 摘要节点
"""

from typing import Any, Dict

from ...exceptions import SummarizationError
from ...services.summary_service import build_fallback_summary
from ...utils.logger import get_logger
from ..context import PipelineServices
from ..state import ReportState

logger = get_logger(__name__)


def make_summarization_node(services: PipelineServices):
    """创建 AI 摘要节点"""

    async def summarization_node(state: ReportState) -> Dict[str, Any]:
        """
        AI 摘要节点

        AI 调用失败时使用替代摘要，流程继续到通知

        Args:
            state: 工作流状态

        Returns:
            更新后的状态，包含 summary
        """
        record = state["record"]
        logger.info(f"[{record.ticket_id}] 开始 AI 摘要")

        try:
            summary = await services.summarizer.summarize(record, state.get("attachments"))
            return {"summary": summary, "summary_error": None, "current_node": "summarization"}

        except SummarizationError as e:
            logger.warning(f"[{record.ticket_id}] AI 摘要失败，使用替代摘要: {e}")
            return {
                "summary": build_fallback_summary(record),
                "summary_error": str(e),
                "current_node": "summarization",
            }

    return summarization_node
