"""
提交内容标准化

纯转换：文本去空白、选项标签映射为代码、生成工单编号。
此阶段不会失败，未知输入回落到默认值。
"""

import random
import threading
import time
from typing import Callable, Dict, Optional, Set

from ..models import ImpactScope, Priority, ReportType, SubmissionRecord
from ..models.report import Classification
from ..utils.logger import get_logger

logger = get_logger(__name__)

PRIORITY_CODES: Dict[str, str] = {
    "🔥 緊急 (影響營運)": Priority.CRITICAL,
    "⚡ 高 (影響工作)": Priority.HIGH,
    "📋 中 (一般問題)": Priority.MEDIUM,
    "💡 低 (建議改善)": Priority.LOW,
}
DEFAULT_PRIORITY = Priority.MEDIUM

REPORT_TYPE_CODES: Dict[str, str] = {
    "🐛 Bug 回報": ReportType.BUG,
    "✨ 功能需求": ReportType.FEATURE_REQUEST,
    "❓ 使用問題": ReportType.USAGE_QUESTION,
    "🔧 技術支援": ReportType.TECHNICAL_SUPPORT,
}
DEFAULT_REPORT_TYPE = ReportType.BUG

IMPACT_SCOPE_CODES: Dict[str, str] = {
    "🌐 所有用戶": ImpactScope.ALL_USERS,
    "👥 多位用戶": ImpactScope.MULTIPLE_USERS,
    "👤 單一用戶": ImpactScope.SINGLE_USER,
    "🏢 內部測試": ImpactScope.INTERNAL,
}
DEFAULT_IMPACT_SCOPE = ImpactScope.SINGLE_USER

NARRATIVE_FIELDS = (
    "name",
    "company",
    "preferred_contact",
    "title",
    "description",
    "reproduction_steps",
    "environment",
    "error_message",
    "notes",
    "video_url",
    "document_url",
)

TICKET_PREFIX = "TICKET"
SUFFIX_SPACE = 1000


def lookup_code(label: str, table: Dict[str, str], default: str) -> str:
    """按原文精确匹配，其次去空白后匹配；都不命中时返回默认值"""
    if label in table:
        return table[label]
    return table.get((label or "").strip(), default)


class TicketIdGenerator:
    """
    工单编号生成器

    格式 TICKET-<毫秒时间戳>-<三位随机数>。
    同一毫秒内记录已用后缀并重新抽取；1000 个后缀用尽时顺延到下一毫秒。
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._last_ms = -1
        self._used: Set[int] = set()

    def __call__(self) -> str:
        with self._lock:
            now_ms = max(self._clock(), self._last_ms)
            if now_ms != self._last_ms:
                self._last_ms = now_ms
                self._used = set()
            if len(self._used) >= SUFFIX_SPACE:
                self._last_ms += 1
                self._used = set()

            suffix = self._rng.randrange(SUFFIX_SPACE)
            while suffix in self._used:
                suffix = self._rng.randrange(SUFFIX_SPACE)
            self._used.add(suffix)

            return f"{TICKET_PREFIX}-{self._last_ms}-{suffix:03d}"


generate_ticket_id = TicketIdGenerator()


def normalize_submission(
    record: SubmissionRecord,
    ticket_id_factory: Callable[[], str] = generate_ticket_id,
) -> SubmissionRecord:
    """
    标准化提交内容

    Args:
        record: 已通过校验的记录
        ticket_id_factory: 工单编号生成函数

    Returns:
        新的 SubmissionRecord，分类字段带有代码，并附带工单编号
    """
    updates = {field: getattr(record, field).strip() for field in NARRATIVE_FIELDS}
    updates["email"] = record.email.strip().lower()
    updates["phone"] = "".join(record.phone.split())

    report_type_label = record.report_type.label.strip()
    priority_label = record.priority.label.strip()
    impact_label = record.impact_scope.label.strip()

    updates["report_type"] = Classification(
        label=report_type_label,
        code=lookup_code(record.report_type.label, REPORT_TYPE_CODES, DEFAULT_REPORT_TYPE),
    )
    updates["priority"] = Classification(
        label=priority_label,
        code=lookup_code(record.priority.label, PRIORITY_CODES, DEFAULT_PRIORITY),
    )
    updates["impact_scope"] = Classification(
        label=impact_label,
        code=lookup_code(record.impact_scope.label, IMPACT_SCOPE_CODES, DEFAULT_IMPACT_SCOPE),
    )
    updates["ticket_id"] = ticket_id_factory()

    normalized = record.model_copy(update=updates)
    logger.debug(
        f"[{normalized.ticket_id}] 标准化完成: type={normalized.report_type.code}, "
        f"priority={normalized.priority.code}, impact={normalized.impact_scope.code}"
    )
    return normalized
