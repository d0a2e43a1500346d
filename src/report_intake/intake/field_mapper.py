"""
表单字段映射

将问题标签 -> 回答的扁平映射转换为 SubmissionRecord
"""

from typing import Dict, List

from ..models import FormEvent, SubmissionRecord
from ..models.event import AnswerValue
from ..models.report import Classification
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 表单问题标签 -> 记录字段
FIELD_LABELS: Dict[str, str] = {
    "姓名": "name",
    "電子郵件": "email",
    "聯絡電話": "phone",
    "公司名稱": "company",
    "偏好聯絡方式": "preferred_contact",
    "問題類型": "report_type",
    "優先級": "priority",
    "影響範圍": "impact_scope",
    "問題標題": "title",
    "問題描述": "description",
    "重現步驟": "reproduction_steps",
    "環境資訊": "environment",
    "錯誤訊息": "error_message",
    "影片連結": "video_url",
    "文件連結": "document_url",
    "附件上傳": "attachment_refs",
    "其他備註": "notes",
}

CLASSIFICATION_FIELDS = ("report_type", "priority", "impact_scope")
FILE_FIELD = "attachment_refs"


def _as_text(value: AnswerValue) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def _as_refs(value: AnswerValue) -> List[str]:
    if isinstance(value, list):
        refs = value
    elif value:
        refs = str(value).split(",")
    else:
        refs = []
    return [str(ref).strip() for ref in refs if str(ref).strip()]


def map_answers(event: FormEvent) -> SubmissionRecord:
    """
    映射表单回答

    未知标签忽略，缺失标签视为空值。

    Args:
        event: 表单提交事件

    Returns:
        未经校验的 SubmissionRecord（所有文本字段保持原样）
    """
    fields: Dict[str, object] = {}

    for label, value in event.answers.items():
        field = FIELD_LABELS.get(label.strip())
        if field is None:
            logger.debug(f"忽略未知表单标签: {label}")
            continue

        if field == FILE_FIELD:
            fields[field] = _as_refs(value)
        elif field in CLASSIFICATION_FIELDS:
            fields[field] = Classification(label=_as_text(value))
        else:
            fields[field] = _as_text(value)

    meta = event.metadata
    return SubmissionRecord(
        **fields,
        submitted_at=meta.submitted_at,
        source=meta.source,
        row_index=meta.row_index,
    )
