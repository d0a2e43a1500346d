"""
客户回报数据模型
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class Priority:
    """优先级代码"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = (CRITICAL, HIGH, MEDIUM, LOW)


class ReportType:
    """回报类型代码"""

    BUG = "bug"
    FEATURE_REQUEST = "feature_request"
    USAGE_QUESTION = "usage_question"
    TECHNICAL_SUPPORT = "technical_support"

    ALL = (BUG, FEATURE_REQUEST, USAGE_QUESTION, TECHNICAL_SUPPORT)


class ImpactScope:
    """影响范围代码"""

    ALL_USERS = "all_users"
    MULTIPLE_USERS = "multiple_users"
    SINGLE_USER = "single_user"
    INTERNAL = "internal"

    ALL = (ALL_USERS, MULTIPLE_USERS, SINGLE_USER, INTERNAL)


class Severity:
    """AI 判定的严重程度"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = (CRITICAL, HIGH, MEDIUM, LOW)


class Complexity:
    """处理复杂度"""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"

    ALL = (SIMPLE, MODERATE, COMPLEX)


SUMMARY_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 200
MAX_KEY_POINTS = 5
MAX_SUGGESTED_ACTIONS = 3


def truncate(text: str, limit: int) -> str:
    """截断文本，超长时以省略号结尾"""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class Classification(BaseModel):
    """分类字段：保留原始标签与标准化代码"""

    label: str = Field("", description="表单原始选项文字")
    code: Optional[str] = Field(None, description="标准化代码")


class AttachmentMeta(BaseModel):
    """已接受附件的元信息"""

    id: str = Field(..., description="文件标识（对象键）")
    name: str = Field(..., description="显示名称")
    size: int = Field(..., description="文件大小（字节）")
    mime_type: str = Field(..., description="MIME 类型")
    view_url: str = Field(..., description="公开浏览地址")
    download_url: str = Field(..., description="直接下载地址")
    thumbnail_url: Optional[str] = Field(None, description="缩略图地址")

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class AttachmentResolution(BaseModel):
    """附件处理结果"""

    accepted: List[AttachmentMeta] = Field(default_factory=list)
    total_size: int = Field(0, description="已接受附件总字节数")
    errors: List[str] = Field(default_factory=list, description="单个文件的错误信息")


class SubmissionRecord(BaseModel):
    """一次客户回报的内存表示"""

    # 身份
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    preferred_contact: str = ""

    # 分类
    report_type: Classification = Field(default_factory=Classification)
    priority: Classification = Field(default_factory=Classification)
    impact_scope: Classification = Field(default_factory=Classification)

    # 叙述
    title: str = ""
    description: str = ""
    reproduction_steps: str = ""
    environment: str = ""
    error_message: str = ""
    notes: str = ""

    # 参考链接
    video_url: str = ""
    document_url: str = ""

    # 附件
    attachment_refs: List[str] = Field(default_factory=list, description="表单上传的文件引用")
    attachments: List[AttachmentMeta] = Field(default_factory=list)

    ticket_id: Optional[str] = None

    # 事件元数据
    submitted_at: Optional[datetime] = None
    source: Optional[str] = None
    row_index: Optional[int] = None

    @property
    def has_reference_links(self) -> bool:
        return bool(self.video_url or self.document_url)


def _clean_list(value, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(item).strip() for item in value if item is not None and str(item).strip()]
    return items[:limit]


class Summary(BaseModel):
    """
    AI 结构化摘要

    summary 为必填；其余字段缺失或格式错误时回落到安全默认值。
    """

    summary: str = Field(..., min_length=1, description="简短摘要")
    key_points: List[str] = Field(default_factory=list, description="关键要点（最多 5 条）")
    severity: str = Field(Severity.MEDIUM, description="严重程度")
    category: str = Field("", description="问题分类")
    suggested_actions: List[str] = Field(default_factory=list, description="建议处理（最多 3 条）")
    complexity: str = Field(Complexity.MODERATE, description="处理复杂度")
    requires_immediate_attention: bool = Field(False, description="是否需要立即处理")
    notes: str = Field("", description="补充说明")
    is_fallback: bool = Field(False, description="是否为本地生成的替代摘要")

    @field_validator("summary", mode="before")
    @classmethod
    def clean_summary(cls, v):
        if isinstance(v, str):
            return truncate(v.strip(), SUMMARY_MAX_LENGTH)
        return v

    @field_validator("key_points", mode="before")
    @classmethod
    def clean_key_points(cls, v) -> List[str]:
        return _clean_list(v, MAX_KEY_POINTS)

    @field_validator("suggested_actions", mode="before")
    @classmethod
    def clean_suggested_actions(cls, v) -> List[str]:
        return _clean_list(v, MAX_SUGGESTED_ACTIONS)

    @field_validator("severity", mode="before")
    @classmethod
    def clean_severity(cls, v) -> str:
        value = str(v).strip().lower() if v is not None else ""
        return value if value in Severity.ALL else Severity.MEDIUM

    @field_validator("complexity", mode="before")
    @classmethod
    def clean_complexity(cls, v) -> str:
        value = str(v).strip().lower() if v is not None else ""
        return value if value in Complexity.ALL else Complexity.MODERATE

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, v) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("requires_immediate_attention", mode="before")
    @classmethod
    def clean_immediate(cls, v) -> bool:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "1")
        return False

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v) -> str:
        if not isinstance(v, str):
            return ""
        return truncate(v.strip(), NOTES_MAX_LENGTH)
