"""
LangGraph 工作流节点模块
"""

from .intake import make_field_mapping_node, make_normalization_node, make_validation_node
from .attachment_resolution import make_attachment_resolution_node
from .summarization import make_summarization_node
from .issue_forwarding import make_issue_forwarding_node
from .notification import make_notification_node

__all__ = [
    "make_field_mapping_node",
    "make_validation_node",
    "make_normalization_node",
    "make_attachment_resolution_node",
    "make_summarization_node",
    "make_issue_forwarding_node",
    "make_notification_node",
]
