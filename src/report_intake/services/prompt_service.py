"""
提示词管理服务

负责加载提示词模板
"""

from pathlib import Path
from typing import Optional
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "resources" / "prompts"


class PromptService:
    """提示词管理服务"""

    def __init__(self, prompts_dir: Optional[str] = None):
        """
        初始化提示词服务

        Args:
            prompts_dir: 提示词目录路径，默认使用包内 resources/prompts
        """
        self.prompts_dir = Path(prompts_dir) if prompts_dir else DEFAULT_PROMPTS_DIR
        if not self.prompts_dir.exists():
            logger.warning(f"提示词目录未找到: {self.prompts_dir}")

    def load_report_summary_prompt(self) -> str:
        """
        加载客户回报摘要的系统提示词

        Returns:
            提示词内容
        """
        return self._load_file("report_summary.txt")

    def _load_file(self, relative_path: str) -> str:
        """
        加载提示词文件

        Args:
            relative_path: 相对于 prompts_dir 的文件路径

        Returns:
            文件内容

        Raises:
            FileNotFoundError: 如果文件不存在
        """
        file_path = self.prompts_dir / relative_path

        if not file_path.exists():
            logger.error(f"提示词文件未找到: {file_path}")
            raise FileNotFoundError(f"Prompt file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
        logger.debug(f"从 {relative_path} 加载提示词")
        return content
