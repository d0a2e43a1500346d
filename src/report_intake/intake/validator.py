"""
提交内容校验

所有检查全部执行，错误累积后一次返回
"""

import re
from typing import List

from ..models import SubmissionRecord, ValidationResult
from ..utils.logger import get_logger

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s+\-()]+$")

# 字段 -> 显示名称
REQUIRED_FIELDS = {
    "name": "姓名",
    "email": "電子郵件",
    "preferred_contact": "偏好聯絡方式",
    "report_type": "問題類型",
    "priority": "優先級",
    "impact_scope": "影響範圍",
    "title": "問題標題",
    "description": "問題描述",
}

URL_FIELDS = {
    "video_url": "影片連結",
    "document_url": "文件連結",
}


def _field_text(record: SubmissionRecord, field: str) -> str:
    value = getattr(record, field)
    if hasattr(value, "label"):
        value = value.label
    return (value or "").strip()


def validate_submission(record: SubmissionRecord, title_max_length: int = 100) -> ValidationResult:
    """
    校验提交内容

    Args:
        record: 字段映射后的记录
        title_max_length: 标题长度上限

    Returns:
        ValidationResult，包含全部错误信息
    """
    errors: List[str] = []

    for field, display in REQUIRED_FIELDS.items():
        if not _field_text(record, field):
            errors.append(f"{display}為必填欄位")

    email = record.email.strip()
    if email and not EMAIL_PATTERN.match(email):
        errors.append(f"電子郵件格式不正確: {email}")

    phone = record.phone.strip()
    if phone and not PHONE_PATTERN.match(phone):
        errors.append(f"聯絡電話格式不正確: {phone}")

    for field, display in URL_FIELDS.items():
        url = _field_text(record, field)
        if url and not url.startswith(("http://", "https://")):
            errors.append(f"{display}必須以 http:// 或 https:// 開頭")

    title = record.title.strip()
    if len(title) > title_max_length:
        errors.append(f"問題標題不可超過 {title_max_length} 個字元（目前 {len(title)}）")

    if errors:
        logger.warning(f"表单校验失败: {len(errors)} 项错误")
    else:
        logger.debug("表单校验通过")

    return ValidationResult(is_valid=not errors, errors=errors)
