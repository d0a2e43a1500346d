"""
流水线异常定义
"""

from typing import Optional


class IntakeError(Exception):
    """流水线异常基类"""


class AttachmentError(IntakeError):
    """单个附件处理失败，不中断整体提交"""

    def __init__(self, reference: str, message: str):
        self.reference = reference
        super().__init__(message)


class SummarizationError(IntakeError):
    """AI 摘要调用失败或返回结果不可解析"""


class DeliveryError(IntakeError):
    """Webhook 投递失败"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)
