"""
配置管理模块

使用 Pydantic Settings 管理环境变量配置。
所有配置集中在 Settings 对象中，由调用方显式传入流水线。
"""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# 在所有配置类之前加载 .env 到 os.environ
load_dotenv()

_MODEL_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in value.split(",") if item.strip()]


class AppSettings(BaseSettings):
    """应用基础配置"""

    app_name: str = Field(default="report-intake", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    app_env: Literal["development", "staging", "production"] = Field(
        default="production", alias="APP_ENV"
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    pipeline_timeout: float = Field(default=120.0, alias="PIPELINE_TIMEOUT")

    model_config = _MODEL_CONFIG


class LLMSettings(BaseSettings):
    """LLM 配置"""

    openai_api_key: str = Field(..., alias="OPENAI_API_KEY")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", alias="OPENAI_BASE_URL"
    )
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=1000, alias="OPENAI_MAX_TOKENS")
    openai_temperature: float = Field(default=0.3, alias="OPENAI_TEMPERATURE")
    openai_timeout: float = Field(default=30.0, alias="OPENAI_TIMEOUT")

    model_config = _MODEL_CONFIG


class DiscordSettings(BaseSettings):
    """Discord Webhook 配置"""

    discord_webhook_url: str = Field(..., alias="DISCORD_WEBHOOK_URL")
    discord_username: str = Field(default="客戶回報系統", alias="DISCORD_USERNAME")
    discord_avatar_url: Optional[str] = Field(default=None, alias="DISCORD_AVATAR_URL")
    discord_timeout: float = Field(default=10.0, alias="DISCORD_TIMEOUT")
    discord_urgent_mention: str = Field(
        default="@everyone", alias="DISCORD_URGENT_MENTION"
    )
    # 带 custom_id 的按钮仅应用程序所属的 Webhook 可用，普通 incoming webhook 开启后会返回 400
    discord_ticket_components: bool = Field(
        default=False, alias="DISCORD_TICKET_COMPONENTS"
    )

    model_config = _MODEL_CONFIG


class StorageSettings(BaseSettings):
    """附件存储（阿里云 OSS）配置"""

    aliyun_oss_access_key_id: str = Field(..., alias="ALIYUN_OSS_ACCESS_KEY_ID")
    aliyun_oss_access_key_secret: str = Field(..., alias="ALIYUN_OSS_ACCESS_KEY_SECRET")
    aliyun_oss_endpoint: str = Field(..., alias="ALIYUN_OSS_ENDPOINT")
    aliyun_oss_bucket_name: str = Field(..., alias="ALIYUN_OSS_BUCKET_NAME")
    oss_timeout: int = Field(default=30, alias="OSS_TIMEOUT")
    max_file_size: int = Field(default=10 * 1024 * 1024, alias="ATTACHMENT_MAX_FILE_SIZE")
    allowed_extensions: str = Field(
        default="jpg,jpeg,png,gif,webp", alias="ATTACHMENT_ALLOWED_EXTENSIONS"
    )
    thumbnail_width: int = Field(default=400, alias="ATTACHMENT_THUMBNAIL_WIDTH")

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def parse_allowed_extensions(cls, v) -> str:
        """统一为逗号分隔的小写扩展名"""
        return ",".join(ext.lower().lstrip(".") for ext in _split_csv(v))

    @property
    def allowed_extension_set(self) -> List[str]:
        return _split_csv(self.allowed_extensions)

    model_config = _MODEL_CONFIG


class EmailSettings(BaseSettings):
    """邮件配置"""

    smtp_host: str = Field(..., alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_user: str = Field(..., alias="SMTP_USER")
    smtp_password: str = Field(..., alias="SMTP_PASSWORD")
    smtp_from: str = Field(..., alias="SMTP_FROM")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")
    email_admin: str = Field(..., alias="EMAIL_ADMIN")

    @property
    def admin_recipients(self) -> List[str]:
        """解析管理员邮箱列表"""
        return _split_csv(self.email_admin)

    model_config = _MODEL_CONFIG


class FormSettings(BaseSettings):
    """表单校验配置"""

    title_max_length: int = Field(default=100, alias="FORM_TITLE_MAX_LENGTH")

    model_config = _MODEL_CONFIG


class IssueSystemSettings(BaseSettings):
    """内部问题系统配置（可选）"""

    issue_system_url: Optional[str] = Field(default=None, alias="ISSUE_SYSTEM_URL")
    issue_system_api_key: Optional[str] = Field(default=None, alias="ISSUE_SYSTEM_API_KEY")
    issue_system_timeout: float = Field(default=10.0, alias="ISSUE_SYSTEM_TIMEOUT")

    @property
    def enabled(self) -> bool:
        return bool(self.issue_system_url)

    model_config = _MODEL_CONFIG


class LogSettings(BaseSettings):
    """日志配置"""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default="logs/app.log", alias="LOG_FILE")
    log_format: Literal["json", "text"] = Field(default="json", alias="LOG_FORMAT")

    model_config = _MODEL_CONFIG


class Settings:
    """
    配置聚合对象

    未显式提供的子配置从环境变量 / .env 读取。
    测试中可直接传入各子配置实例。
    """

    def __init__(
        self,
        app: Optional[AppSettings] = None,
        llm: Optional[LLMSettings] = None,
        discord: Optional[DiscordSettings] = None,
        storage: Optional[StorageSettings] = None,
        email: Optional[EmailSettings] = None,
        form: Optional[FormSettings] = None,
        issue_system: Optional[IssueSystemSettings] = None,
        log: Optional[LogSettings] = None,
    ):
        self.app = app or AppSettings()
        self.llm = llm or LLMSettings()
        self.discord = discord or DiscordSettings()
        self.storage = storage or StorageSettings()
        self.email = email or EmailSettings()
        self.form = form or FormSettings()
        self.issue_system = issue_system or IssueSystemSettings()
        self.log = log or LogSettings()
