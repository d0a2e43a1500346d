"""
表单接收节点

字段映射、校验、标准化，均为纯函数处理，不发起外部调用
"""

from typing import Any, Dict

from ...intake import map_answers, normalize_submission, validate_submission
from ...utils.logger import get_logger
from ..context import PipelineServices
from ..state import ReportState

logger = get_logger(__name__)


def make_field_mapping_node(services: PipelineServices):
    """创建字段映射节点"""

    async def field_mapping_node(state: ReportState) -> Dict[str, Any]:
        event = state["event"]
        record = map_answers(event)
        logger.info(
            f"收到表单提交: source={event.metadata.source}, row={event.metadata.row_index}, "
            f"附件 {len(record.attachment_refs)} 个"
        )
        return {"record": record, "current_node": "field_mapping"}

    return field_mapping_node


def make_validation_node(services: PipelineServices):
    """创建校验节点"""

    async def validation_node(state: ReportState) -> Dict[str, Any]:
        result = validate_submission(state["record"], services.title_max_length)
        if not result.is_valid:
            logger.warning(f"提交内容校验失败: {result.errors}")
        return {"validation_errors": result.errors, "current_node": "validation"}

    return validation_node


def make_normalization_node(services: PipelineServices):
    """创建标准化节点"""

    async def normalization_node(state: ReportState) -> Dict[str, Any]:
        record = normalize_submission(state["record"], services.ticket_id_factory)
        logger.info(
            f"[{record.ticket_id}] 工单编号已生成: type={record.report_type.code}, "
            f"priority={record.priority.code}"
        )
        return {"record": record, "current_node": "normalization"}

    return normalization_node
