"""
管理员告警邮件服务
"""

from email.mime.text import MIMEText
from typing import List, Optional

import aiosmtplib

from ..config import EmailSettings
from ..models import SubmissionRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)


def build_operator_alert(
    error: str,
    stage: str,
    record: Optional[SubmissionRecord] = None,
) -> tuple:
    """
    构建告警邮件主题与正文

    Args:
        error: 原始错误信息
        stage: 出错的处理阶段
        record: 提交记录（可能尚未完成标准化）

    Returns:
        (subject, body)
    """
    record = record or SubmissionRecord()
    ticket = record.ticket_id or "未產生"

    subject = f"【客戶回報系統錯誤】{record.title or ticket}"
    body = f"""客戶回報處理失敗，請人工確認。

回報編號: {ticket}
最後完成階段: {stage}
錯誤訊息:
{error}

提交者資訊:
姓名: {record.name or "-"}
電子郵件: {record.email or "-"}
電話: {record.phone or "-"}
公司: {record.company or "-"}
問題標題: {record.title or "-"}
優先級: {record.priority.label or "-"}

此郵件由客戶回報系統自動發送。
"""
    return subject, body


class EmailService:
    """管理员告警邮件服务"""

    def __init__(self, settings: EmailSettings):
        """
        初始化邮件服务

        Args:
            settings: 邮件配置
        """
        self.settings = settings
        logger.info(
            f"Email Service initialized: SMTP={settings.smtp_host}:{settings.smtp_port}"
        )

    async def send_operator_alert(
        self, subject: str, body: str, recipients: Optional[List[str]] = None
    ) -> None:
        """
        发送纯文本告警邮件

        Args:
            subject: 邮件主题
            body: 纯文本正文
            recipients: 收件人，默认使用配置的管理员邮箱
        """
        to_emails = recipients or self.settings.admin_recipients
        if not to_emails:
            raise ValueError("No operator alert recipients configured")

        msg = MIMEText(body, "plain", "utf-8")
        msg["From"] = self.settings.smtp_from
        msg["To"] = ", ".join(to_emails)
        msg["Subject"] = subject

        await self._send_smtp(msg, to_emails)
        logger.info(f"Operator alert sent to {len(to_emails)} recipients")

    async def _send_smtp(self, msg: MIMEText, recipients: List[str]) -> None:
        """
        通过 SMTP 发送邮件

        Args:
            msg: 邮件消息对象
            recipients: 收件人列表
        """
        try:
            smtp = aiosmtplib.SMTP(
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                use_tls=self.settings.smtp_use_tls,
                timeout=self.settings.smtp_timeout,
            )

            await smtp.connect()
            await smtp.login(self.settings.smtp_user, self.settings.smtp_password)
            await smtp.send_message(msg, recipients=recipients)
            await smtp.quit()

            logger.debug(f"SMTP send successful to {len(recipients)} recipients")

        except Exception as e:
            logger.error(f"Failed to send email via SMTP: {e}")
            raise
