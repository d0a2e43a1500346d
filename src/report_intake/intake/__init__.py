"""
表单接收：字段映射、校验、标准化
"""

from .field_mapper import map_answers
from .normalizer import TicketIdGenerator, generate_ticket_id, normalize_submission
from .validator import validate_submission

__all__ = [
    "map_answers",
    "validate_submission",
    "normalize_submission",
    "generate_ticket_id",
    "TicketIdGenerator",
]
