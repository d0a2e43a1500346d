"""
Discord Webhook 投递服务
"""

from typing import Any, Dict, Optional
import httpx
from ..config import DiscordSettings
from ..exceptions import DeliveryError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DiscordService:
    """Discord Webhook 服务"""

    def __init__(self, settings: DiscordSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        初始化 Discord 服务

        Args:
            settings: Discord 配置
            transport: 自定义 httpx 传输层（测试时注入）
        """
        self.settings = settings
        self.webhook_url = settings.discord_webhook_url
        self.timeout = settings.discord_timeout
        self._transport = transport
        logger.info("Discord Service initialized")

    async def send(self, payload: Dict[str, Any]) -> None:
        """
        投递 Webhook 消息

        2xx（含 204）视为成功；其余状态码、网络错误与超时均视为投递失败，不重试。

        Args:
            payload: Webhook JSON payload

        Raises:
            DeliveryError: 投递失败
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.webhook_url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Discord webhook timed out after {self.timeout}s: {e}")
            raise DeliveryError(f"Discord webhook 超时 ({self.timeout}s)") from e
        except httpx.RequestError as e:
            logger.error(f"Discord webhook request error: {e}")
            raise DeliveryError(f"Discord webhook 连接失败: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(f"Discord webhook failed with HTTP {response.status_code}: {body[:200]}")
            raise DeliveryError(
                f"Discord webhook 返回 HTTP {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )

        logger.debug(f"Discord webhook delivered: HTTP {response.status_code}")
