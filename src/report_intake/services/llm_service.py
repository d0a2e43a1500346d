"""
LLM 服务

负责与大语言模型交互，返回 JSON 结构化结果
"""

import json
from typing import Any, Dict
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage, SystemMessage
from ..config import LLMSettings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class LLMService:
    """LLM 服务"""

    def __init__(self, settings: LLMSettings):
        """
        初始化 LLM 服务

        Args:
            settings: LLM 配置
        """
        self.settings = settings
        self.llm = self._create_llm()

    def _create_llm(self) -> ChatOpenAI:
        """
        创建 LLM 客户端

        低温度、有限输出长度、要求 JSON 输出；超时由客户端控制，不自动重试。

        Returns:
            LLM 客户端实例
        """
        return ChatOpenAI(
            model=self.settings.openai_model,
            api_key=self.settings.openai_api_key,
            base_url=self.settings.openai_base_url,
            temperature=self.settings.openai_temperature,
            max_tokens=self.settings.openai_max_tokens,
            timeout=self.settings.openai_timeout,
            max_retries=0,
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """
        调用 LLM 并解析 JSON 响应

        Args:
            system_prompt: 系统指令
            user_prompt: 用户提示词

        Returns:
            解析后的 JSON 对象

        Raises:
            ValueError: 响应不是 JSON 对象
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]

        response = await self.llm.ainvoke(messages)
        logger.debug(f"LLM 输出: {response.content}")

        result = self._parse_json_response(response.content)
        if not isinstance(result, dict):
            raise ValueError(f"LLM response is not a JSON object: {type(result).__name__}")
        return result

    def _parse_json_response(self, response_text: str) -> Any:
        """
        解析 LLM 返回的 JSON 响应

        Args:
            response_text: LLM 响应文本

        Returns:
            解析后的 JSON 对象

        Raises:
            ValueError: 如果响应不是有效的 JSON
        """
        try:
            return json.loads(response_text)
        except json.JSONDecodeError:
            # 尝试提取 JSON 代码块
            if "```json" in response_text:
                start = response_text.find("```json") + 7
                end = response_text.find("```", start)
                return json.loads(response_text[start:end].strip())
            elif "```" in response_text:
                start = response_text.find("```") + 3
                end = response_text.find("```", start)
                return json.loads(response_text[start:end].strip())
            else:
                return json.loads(response_text.strip())
