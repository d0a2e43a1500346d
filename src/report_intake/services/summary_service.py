"""
客户回报摘要服务

构建 AI 请求、解析结构化摘要；AI 不可用时由表单内容生成替代摘要
"""

import asyncio
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from ..exceptions import SummarizationError
from ..models import AttachmentResolution, Complexity, Priority, SubmissionRecord, Summary
from ..models.report import truncate, SUMMARY_MAX_LENGTH
from ..utils.logger import get_logger
from .llm_service import LLMService
from .prompt_service import PromptService

logger = get_logger(__name__)

URGENT_TOKENS = ("緊急", "紧急", "urgent", "critical", "🔥")

FALLBACK_NOTE = "AI 分析暫時無法使用，此摘要由系統依表單內容自動產生"
FALLBACK_ACTION = "請人工檢視回報內容並確認處理方式"


class SummaryRequest(BaseModel):
    """发送给 LLM 的摘要请求"""

    system_prompt: str = Field(..., description="系统指令（含输出格式约束）")
    user_prompt: str = Field(..., description="包含完整回报内容的提示词")


def _or_dash(value: str) -> str:
    return value if value else "-"


def build_user_prompt(record: SubmissionRecord, resolution: Optional[AttachmentResolution] = None) -> str:
    """将标准化后的回报内容嵌入提示词"""
    resolution = resolution or AttachmentResolution()
    return f"""
請分析以下客戶回報並依指定格式回傳 JSON。

【回報編號】{record.ticket_id or "-"}

【客戶資訊】
姓名: {_or_dash(record.name)}
電子郵件: {_or_dash(record.email)}
電話: {_or_dash(record.phone)}
公司: {_or_dash(record.company)}
偏好聯絡方式: {_or_dash(record.preferred_contact)}

【分類】
問題類型: {_or_dash(record.report_type.label)} ({record.report_type.code})
優先級: {_or_dash(record.priority.label)} ({record.priority.code})
影響範圍: {_or_dash(record.impact_scope.label)} ({record.impact_scope.code})

【問題內容】
標題: {_or_dash(record.title)}
描述: {_or_dash(record.description)}
重現步驟: {_or_dash(record.reproduction_steps)}
環境資訊: {_or_dash(record.environment)}
錯誤訊息: {_or_dash(record.error_message)}
其他備註: {_or_dash(record.notes)}

【附件】
已上傳檔案: {len(resolution.accepted)} 個
處理失敗檔案: {len(resolution.errors)} 個
影片連結: {"有" if record.video_url else "無"}
文件連結: {"有" if record.document_url else "無"}
""".strip()


def build_fallback_summary(record: SubmissionRecord) -> Summary:
    """
    由表单内容生成确定性的替代摘要

    Args:
        record: 标准化后的记录

    Returns:
        is_fallback=True 的 Summary
    """
    type_label = record.report_type.label or record.report_type.code or "回報"
    synopsis = truncate(f"{type_label}: {record.title}", SUMMARY_MAX_LENGTH)

    key_points = []
    if record.priority.label:
        key_points.append(f"優先級: {record.priority.label}")
    if record.impact_scope.label:
        key_points.append(f"影響範圍: {record.impact_scope.label}")

    priority_label = record.priority.label.lower()
    immediate = any(token in priority_label for token in URGENT_TOKENS)

    return Summary(
        summary=synopsis,
        key_points=key_points,
        severity=record.priority.code or Priority.MEDIUM,
        category=record.report_type.label,
        suggested_actions=[FALLBACK_ACTION],
        complexity=Complexity.MODERATE,
        requires_immediate_attention=immediate,
        notes=FALLBACK_NOTE,
        is_fallback=True,
    )


class SummaryService:
    """客户回报摘要服务"""

    def __init__(
        self,
        llm_service: LLMService,
        prompt_service: Optional[PromptService] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            llm_service: LLM 服务
            prompt_service: 提示词服务
            timeout: 单次调用超时（秒）
        """
        self.llm = llm_service
        self.prompts = prompt_service or PromptService()
        self.timeout = timeout

    def build_request(
        self, record: SubmissionRecord, resolution: Optional[AttachmentResolution] = None
    ) -> SummaryRequest:
        return SummaryRequest(
            system_prompt=self.prompts.load_report_summary_prompt(),
            user_prompt=build_user_prompt(record, resolution),
        )

    async def summarize(
        self, record: SubmissionRecord, resolution: Optional[AttachmentResolution] = None
    ) -> Summary:
        """
        调用 LLM 生成结构化摘要

        要么得到完整摘要，要么抛出异常，不接受部分结果。

        Raises:
            SummarizationError: 调用失败、超时或返回内容不符合格式
        """
        request = self.build_request(record, resolution)

        try:
            data = await asyncio.wait_for(
                self.llm.complete_json(request.system_prompt, request.user_prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise SummarizationError(f"AI 摘要调用超时 ({self.timeout}s)") from e
        except Exception as e:
            raise SummarizationError(f"AI 摘要调用失败: {e}") from e

        try:
            summary = Summary.model_validate({**data, "is_fallback": False})
        except PydanticValidationError as e:
            raise SummarizationError(f"AI 摘要格式不正确: {e.error_count()} 个字段错误") from e

        logger.info(
            f"[{record.ticket_id}] AI 摘要完成: severity={summary.severity}, "
            f"immediate={summary.requires_immediate_attention}"
        )
        return summary
