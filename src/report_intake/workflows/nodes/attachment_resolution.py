"""
附件处理节点
"""

from typing import Any, Dict

from ...utils.logger import get_logger
from ..context import PipelineServices
from ..state import ReportState

logger = get_logger(__name__)


def make_attachment_resolution_node(services: PipelineServices):
    """创建附件处理节点"""

    async def attachment_resolution_node(state: ReportState) -> Dict[str, Any]:
        """
        附件处理节点

        单个文件的错误记录在 resolution.errors 中，不中断流程

        Args:
            state: 工作流状态

        Returns:
            更新后的状态，包含 attachments 与带附件的 record
        """
        record = state["record"]

        resolution = await services.attachments.resolve(record.attachment_refs)
        if resolution.errors:
            logger.warning(f"[{record.ticket_id}] {len(resolution.errors)} 个附件处理失败")

        return {
            "record": record.model_copy(update={"attachments": resolution.accepted}),
            "attachments": resolution,
            "current_node": "attachment_resolution",
        }

    return attachment_resolution_node
