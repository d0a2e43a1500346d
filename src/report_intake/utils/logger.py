"""
日志工具模块

支持 JSON 和文本格式输出
"""

import logging
import sys
from pathlib import Path
from typing import Optional
import json
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """JSON 格式日志格式化器（简化版）"""

    LEVEL_SHORT = {
        "DEBUG": "DBG",
        "INFO": "INF",
        "WARNING": "WRN",
        "ERROR": "ERR",
        "CRITICAL": "CRT",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "time": datetime.now(timezone.utc).strftime("%H:%M:%S"),
            "lvl": self.LEVEL_SHORT.get(record.levelname, record.levelname[:3]),
            "mod": record.name.split(".")[-1],
            "msg": record.getMessage(),
        }

        # 流水线上下文
        if hasattr(record, "ticket_id"):
            log_data["ticket"] = record.ticket_id
        if hasattr(record, "stage"):
            log_data["stage"] = record.stage

        if record.exc_info:
            log_data["error"] = str(record.exc_info[1])

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """文本格式日志格式化器"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: str = "json",
) -> None:
    """
    配置全局日志系统

    Args:
        log_level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: 日志文件路径，如果为 None 则只输出到控制台
        log_format: 日志格式 (json | text)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    formatter = JSONFormatter() if log_format == "json" else TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # 第三方库日志降级
    for noisy in ("uvicorn", "fastapi", "httpx", "httpcore", "openai", "oss2"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    获取指定名称的日志记录器

    Args:
        name: 日志记录器名称，通常使用 __name__

    Returns:
        Logger 实例
    """
    return logging.getLogger(name)


class TicketLoggerAdapter(logging.LoggerAdapter):
    """
    为日志附加工单编号与处理阶段

    使用示例:
        log = TicketLoggerAdapter(logger, {"ticket_id": "TICKET-1-001", "stage": "notification"})
        log.info("Webhook 已送出")
    """

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        ticket_id = self.extra.get("ticket_id")
        if ticket_id:
            msg = f"[{ticket_id}] {msg}"
        return msg, kwargs
