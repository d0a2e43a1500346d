"""
共享测试夹具：配置、外部服务替身、示例表单
"""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from report_intake.config import (
    AppSettings,
    DiscordSettings,
    EmailSettings,
    FormSettings,
    IssueSystemSettings,
    LLMSettings,
    LogSettings,
    Settings,
    StorageSettings,
)
from report_intake.exceptions import DeliveryError
from report_intake.models import FormEvent
from report_intake.models.event import EventMetadata
from report_intake.pipeline import ReportPipeline
from report_intake.services.attachment_service import AttachmentResolver
from report_intake.services.oss_service import OSSService
from report_intake.services.prompt_service import PromptService
from report_intake.services.summary_service import SummaryService
from report_intake.workflows import PipelineServices


# ============================================================================
# SAMPLE DATA
# ============================================================================

VALID_ANSWERS: Dict[str, Any] = {
    "姓名": "王小明",
    "電子郵件": " Ming@Example.com ",
    "聯絡電話": "+886 912-345-678",
    "公司名稱": "示範科技",
    "偏好聯絡方式": "📧 Email",
    "問題類型": "🐛 Bug 回報",
    "優先級": "🔥 緊急 (影響營運)",
    "影響範圍": "🌐 所有用戶",
    "問題標題": "Cannot log in",
    "問題描述": "Error after password reset",
}

AI_SUMMARY: Dict[str, Any] = {
    "summary": "密碼重設後無法登入",
    "key_points": ["重設密碼後登入失敗", "影響所有用戶"],
    "severity": "critical",
    "category": "登入問題",
    "suggested_actions": ["檢查認證服務", "回滾最近部署"],
    "complexity": "moderate",
    "requires_immediate_attention": True,
    "notes": "可能與最近的認證服務更新有關",
}

MB = 1024 * 1024


def make_event(answers: Optional[Dict[str, Any]] = None, **overrides) -> FormEvent:
    data = dict(VALID_ANSWERS if answers is None else answers)
    data.update(overrides)
    return FormEvent(
        answers=data,
        metadata=EventMetadata(source="customer-report-form", row_index=7),
    )


# ============================================================================
# FAKES
# ============================================================================

class FakeBucket:
    """内存版 OSS Bucket"""

    def __init__(self, files: Optional[Dict[str, tuple]] = None):
        # key -> (size, mime_type)
        self.files = files or {}
        self.head_calls: List[str] = []
        self.acl_calls: List[tuple] = []

    def head_object(self, key: str):
        self.head_calls.append(key)
        if key not in self.files:
            raise KeyError(f"NoSuchKey: {key}")
        size, mime_type = self.files[key]
        return SimpleNamespace(content_length=size, content_type=mime_type)

    def put_object_acl(self, key: str, permission: str) -> None:
        self.acl_calls.append((key, permission))


class FakeLLM:
    """LLM 替身：返回预设结果或抛出异常"""

    def __init__(self, result: Any = None, error: Optional[Exception] = None):
        self.result = AI_SUMMARY if result is None else result
        self.error = error
        self.calls: List[tuple] = []

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.result


class FakeNotifier:
    """Webhook 替身"""

    def __init__(self, error: Optional[DeliveryError] = None):
        self.error = error
        self.payloads: List[Dict[str, Any]] = []

    async def send(self, payload: Dict[str, Any]) -> None:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error


class FakeMailer:
    """告警邮件替身"""

    def __init__(self):
        self.alerts: List[tuple] = []

    async def send_operator_alert(self, subject: str, body: str, recipients=None) -> None:
        self.alerts.append((subject, body))


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(
        ALIYUN_OSS_ACCESS_KEY_ID="test-id",
        ALIYUN_OSS_ACCESS_KEY_SECRET="test-secret",
        ALIYUN_OSS_ENDPOINT="oss-cn-hangzhou.aliyuncs.com",
        ALIYUN_OSS_BUCKET_NAME="reports",
    )


@pytest.fixture
def settings(storage_settings) -> Settings:
    return Settings(
        app=AppSettings(PIPELINE_TIMEOUT=10),
        llm=LLMSettings(OPENAI_API_KEY="sk-test"),
        discord=DiscordSettings(DISCORD_WEBHOOK_URL="https://discord.test/api/webhooks/1/token"),
        storage=storage_settings,
        email=EmailSettings(
            SMTP_HOST="smtp.test",
            SMTP_USER="bot",
            SMTP_PASSWORD="secret",
            SMTP_FROM="bot@example.com",
            EMAIL_ADMIN="admin@example.com, oncall@example.com",
        ),
        form=FormSettings(),
        issue_system=IssueSystemSettings(ISSUE_SYSTEM_URL=None),
        log=LogSettings(LOG_FILE=None),
    )


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket(
        {
            "uploads/screenshot.png": (200 * 1024, "image/png"),
            "uploads/photo.jpg": (1 * MB, "image/jpeg"),
            "uploads/huge.png": (11 * MB, "image/png"),
            "uploads/report.pdf": (50 * 1024, "application/pdf"),
        }
    )


@pytest.fixture
def oss_service(storage_settings, bucket) -> OSSService:
    return OSSService(storage_settings, bucket=bucket)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def services(settings, oss_service, llm, notifier) -> PipelineServices:
    return PipelineServices(
        attachments=AttachmentResolver(oss_service, settings.storage),
        summarizer=SummaryService(llm, PromptService(), timeout=5),
        notifier=notifier,
        title_max_length=settings.form.title_max_length,
    )


@pytest.fixture
def pipeline(settings, services, mailer) -> ReportPipeline:
    return ReportPipeline(settings, services=services, email_service=mailer)
