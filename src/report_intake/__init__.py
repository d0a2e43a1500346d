"""
客户回报接收流水线

表单回答 → 校验 → 标准化 → 附件处理 → AI 摘要 → Discord 通知，失败时邮件告警管理员
"""

__version__ = "1.0.0"
