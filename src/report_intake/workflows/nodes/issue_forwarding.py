"""
内部问题系统转发节点
"""

from typing import Any, Dict

from ...services.issue_service import build_issue_payload
from ...utils.logger import get_logger
from ..context import PipelineServices
from ..state import ReportState

logger = get_logger(__name__)


def make_issue_forwarding_node(services: PipelineServices):
    """创建问题系统转发节点"""

    async def issue_forwarding_node(state: ReportState) -> Dict[str, Any]:
        if services.issues is None:
            return {"issue_error": None, "current_node": "issue_forwarding"}

        record = state["record"]
        payload = build_issue_payload(record, state["summary"], state.get("attachments"))

        try:
            await services.issues.create_issue(payload)
            return {"issue_error": None, "current_node": "issue_forwarding"}

        except Exception as e:
            logger.warning(f"[{record.ticket_id}] 问题系统转发失败（不影响通知）: {e}")
            return {"issue_error": str(e), "current_node": "issue_forwarding"}

    return issue_forwarding_node
