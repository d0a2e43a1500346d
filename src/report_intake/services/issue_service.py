"""
内部问题系统转发服务（可选）
"""

from typing import Any, Dict, Optional
import httpx
from ..config import IssueSystemSettings
from ..models import AttachmentResolution, SubmissionRecord, Summary
from ..utils.logger import get_logger

logger = get_logger(__name__)


def build_issue_payload(
    record: SubmissionRecord,
    summary: Summary,
    resolution: Optional[AttachmentResolution] = None,
) -> Dict[str, Any]:
    """构建问题系统的创建请求"""
    resolution = resolution or AttachmentResolution()
    return {
        "ticket_id": record.ticket_id,
        "title": record.title,
        "description": record.description,
        "type": record.report_type.code,
        "priority": record.priority.code,
        "impact_scope": record.impact_scope.code,
        "severity": summary.severity,
        "summary": summary.summary,
        "ai_generated": not summary.is_fallback,
        "reporter": {
            "name": record.name,
            "email": record.email,
            "phone": record.phone,
            "company": record.company,
            "preferred_contact": record.preferred_contact,
        },
        "attachments": [item.view_url for item in resolution.accepted],
        "links": [url for url in (record.video_url, record.document_url) if url],
        "submitted_at": record.submitted_at.isoformat() if record.submitted_at else None,
    }


class IssueService:
    """内部问题系统服务"""

    def __init__(self, settings: IssueSystemSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            settings: 问题系统配置
            transport: 自定义 httpx 传输层（测试时注入）
        """
        self.settings = settings
        self.base_url = (settings.issue_system_url or "").rstrip("/")
        self._transport = transport
        logger.info(f"Issue Service initialized: server={self.base_url}")

    async def create_issue(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        在问题系统中创建记录

        Args:
            payload: build_issue_payload 的结果

        Returns:
            问题系统响应 JSON
        """
        headers = {"Content-Type": "application/json"}
        if self.settings.issue_system_api_key:
            headers["Authorization"] = f"Bearer {self.settings.issue_system_api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.issue_system_timeout, transport=self._transport
            ) as client:
                response = await client.post(f"{self.base_url}/issues", json=payload, headers=headers)
                response.raise_for_status()
                result = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(f"Issue system failed with HTTP {e.response.status_code}: {e}")
            raise Exception(f"问题系统创建失败: HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"Issue system request error: {e}")
            raise Exception(f"问题系统连接失败: {e}")

        logger.info(f"Issue created for {payload.get('ticket_id')}")
        return result
