"""
Discord 通知节点
"""

from typing import Any, Dict

from ...exceptions import DeliveryError
from ...utils.discord_formatter import build_webhook_payload, is_urgent
from ...utils.logger import get_logger
from ..context import PipelineServices
from ..state import ReportState

logger = get_logger(__name__)


def make_notification_node(services: PipelineServices):
    """创建通知节点"""

    async def notification_node(state: ReportState) -> Dict[str, Any]:
        """
        通知节点

        投递失败不重试，记录在状态中由流水线通知管理员

        Args:
            state: 工作流状态

        Returns:
            更新后的状态，包含 delivered
        """
        record = state["record"]
        summary = state["summary"]

        payload = build_webhook_payload(
            record, summary, state.get("attachments"), services.webhook_options
        )
        logger.info(
            f"[{record.ticket_id}] 发送 Discord 通知: severity={summary.severity}, "
            f"urgent={is_urgent(summary)}, embeds={len(payload['embeds'])}"
        )

        try:
            await services.notifier.send(payload)
            logger.info(f"[{record.ticket_id}] Discord 通知发送成功")
            return {"delivered": True, "current_node": "notification"}

        except DeliveryError as e:
            logger.error(f"[{record.ticket_id}] Discord 通知发送失败: {e}")
            return {
                "delivered": False,
                "delivery_error": str(e),
                "delivery_status": e.status_code,
                "current_node": "notification",
            }

    return notification_node
