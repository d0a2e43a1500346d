"""
客户回报处理流水线

工作流外层的统一错误处理：
- 校验失败：记录日志后结束，不通知管理员
- Webhook 投递失败 / 非预期异常 / 超时：发送一次管理员告警邮件
"""

import asyncio
from typing import Any, Dict, Optional

from .config import Settings
from .models import FormEvent, PipelineResult, SubmissionRecord
from .services.email_service import EmailService, build_operator_alert
from .utils.logger import TicketLoggerAdapter, get_logger
from .workflows import PipelineServices, ReportState, build_services, create_report_workflow

logger = get_logger(__name__)


class ReportPipeline:
    """客户回报处理流水线"""

    def __init__(
        self,
        settings: Settings,
        services: Optional[PipelineServices] = None,
        email_service: Optional[EmailService] = None,
    ):
        """
        Args:
            settings: 配置聚合对象
            services: 工作流服务（默认按配置创建）
            email_service: 管理员告警邮件服务
        """
        self.settings = settings
        self.services = services or build_services(settings)
        self.email_service = email_service or EmailService(settings.email)
        self.timeout = settings.app.pipeline_timeout
        self.app = create_report_workflow(self.services)

    async def _run(self, state: ReportState, latest: Dict[str, Any]) -> None:
        # 保留最近一次完整状态，出错时用于告警
        async for values in self.app.astream(state, stream_mode="values"):
            latest.update(values)

    async def process(self, event: FormEvent) -> PipelineResult:
        """
        处理一次表单提交

        Args:
            event: 表单提交事件

        Returns:
            PipelineResult
        """
        state: ReportState = {"event": event}
        latest: Dict[str, Any] = dict(state)

        try:
            await asyncio.wait_for(self._run(state, latest), timeout=self.timeout)

        except asyncio.TimeoutError:
            error = f"处理超时 ({self.timeout}s)"
            stage = latest.get("current_node") or "unknown"
            logger.error(f"流水线超时, 最后节点: {stage}")
            return await self._fail(error, stage, latest)

        except Exception as e:
            stage = latest.get("current_node") or "unknown"
            logger.error(f"流水线发生未预期错误 (节点: {stage}): {e}", exc_info=True)
            return await self._fail(f"{type(e).__name__}: {e}", stage, latest)

        record: Optional[SubmissionRecord] = latest.get("record")

        validation_errors = latest.get("validation_errors") or []
        if validation_errors:
            logger.warning(f"提交被拒绝 ({len(validation_errors)} 项): {'; '.join(validation_errors)}")
            return PipelineResult(status="rejected", validation_errors=validation_errors)

        summary = latest.get("summary")
        resolution = latest.get("attachments")
        common = {
            "ticket_id": record.ticket_id if record else None,
            "attachment_errors": resolution.errors if resolution else [],
            "summary_fallback": bool(summary and summary.is_fallback),
        }

        if not latest.get("delivered"):
            error = latest.get("delivery_error") or "Webhook 未投递"
            alert_sent = await self._alert(error, "notification", record)
            return PipelineResult(status="failed", error=error, alert_sent=alert_sent, **common)

        TicketLoggerAdapter(logger, {"ticket_id": common["ticket_id"]}).info("处理完成")
        return PipelineResult(status="delivered", **common)

    async def _fail(self, error: str, stage: str, latest: Dict[str, Any]) -> PipelineResult:
        record: Optional[SubmissionRecord] = latest.get("record")
        alert_sent = await self._alert(error, stage, record)
        return PipelineResult(
            status="failed",
            ticket_id=record.ticket_id if record else None,
            error=error,
            alert_sent=alert_sent,
        )

    async def _alert(self, error: str, stage: str, record: Optional[SubmissionRecord]) -> bool:
        """
        发送管理员告警

        Returns:
            是否发送成功
        """
        log = TicketLoggerAdapter(
            logger, {"ticket_id": record.ticket_id if record else None, "stage": stage}
        )
        subject, body = build_operator_alert(error, stage, record)
        try:
            await self.email_service.send_operator_alert(subject, body)
            log.info("管理员告警邮件已发送")
            return True
        except Exception as e:
            log.error(f"管理员告警邮件发送失败: {e}", exc_info=True)
            return False
