"""
表单提交事件模型
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator


AnswerValue = Union[str, List[str]]


def _coerce_answer(value: Any) -> Any:
    # 未作答 -> 空字符串；数字、勾选框等标量 -> 文本
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return [_coerce_answer(item) for item in value if item is not None]
    if isinstance(value, (bool, int, float)):
        return str(value)
    return value


class EventMetadata(BaseModel):
    """事件元数据"""

    submitted_at: Optional[datetime] = Field(None, description="提交时间")
    source: Optional[str] = Field(None, description="来源标识（表单 / 表格 ID）")
    row_index: Optional[int] = Field(None, description="表格行号")


class FormEvent(BaseModel):
    """已解析的表单提交事件：问题标签 -> 回答"""

    answers: Dict[str, AnswerValue] = Field(default_factory=dict, description="问题标签到回答的映射")
    metadata: EventMetadata = Field(default_factory=EventMetadata, description="事件元数据")

    @field_validator("answers", mode="before")
    @classmethod
    def coerce_answers(cls, v):
        """表格导出的空值与标量统一转为文本"""
        if not isinstance(v, dict):
            return v
        return {label: _coerce_answer(value) for label, value in v.items()}
