"""
工作流依赖容器
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import Settings
from ..intake.normalizer import generate_ticket_id
from ..services.attachment_service import AttachmentResolver
from ..services.discord_service import DiscordService
from ..services.issue_service import IssueService
from ..services.llm_service import LLMService
from ..services.oss_service import OSSService
from ..services.prompt_service import PromptService
from ..services.summary_service import SummaryService
from ..utils.discord_formatter import WebhookOptions


@dataclass
class PipelineServices:
    """流水线各节点使用的外部服务"""

    attachments: AttachmentResolver
    summarizer: SummaryService
    notifier: DiscordService
    webhook_options: WebhookOptions = field(default_factory=WebhookOptions)
    issues: Optional[IssueService] = None
    title_max_length: int = 100
    ticket_id_factory: Callable[[], str] = generate_ticket_id


def build_services(settings: Settings) -> PipelineServices:
    """
    根据配置创建全部服务

    Args:
        settings: 配置聚合对象

    Returns:
        PipelineServices
    """
    storage = OSSService(settings.storage)
    discord = settings.discord

    return PipelineServices(
        attachments=AttachmentResolver(storage, settings.storage),
        summarizer=SummaryService(
            LLMService(settings.llm),
            PromptService(),
            timeout=settings.llm.openai_timeout,
        ),
        notifier=DiscordService(discord),
        webhook_options=WebhookOptions(
            username=discord.discord_username,
            avatar_url=discord.discord_avatar_url,
            urgent_mention=discord.discord_urgent_mention,
            ticket_components=discord.discord_ticket_components,
        ),
        issues=IssueService(settings.issue_system) if settings.issue_system.enabled else None,
        title_max_length=settings.form.title_max_length,
    )
