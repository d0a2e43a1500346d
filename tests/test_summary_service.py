"""
AI 摘要与替代摘要单元测试
"""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from conftest import AI_SUMMARY, FakeLLM, make_event
from report_intake.exceptions import SummarizationError
from report_intake.intake import map_answers, normalize_submission
from report_intake.models import AttachmentResolution, Summary
from report_intake.services.llm_service import LLMService
from report_intake.services.prompt_service import PromptService
from report_intake.services.summary_service import (
    FALLBACK_NOTE,
    SummaryService,
    build_fallback_summary,
    build_user_prompt,
)


@pytest.fixture
def record():
    return normalize_submission(map_answers(make_event()), lambda: "TICKET-1-001")


# ============================================================================
# SUMMARY MODEL DEFAULTS
# ============================================================================

class TestSummaryModel:
    """AI 输出异常时的安全默认值"""

    def test_full_payload(self):
        summary = Summary.model_validate(AI_SUMMARY)

        assert summary.severity == "critical"
        assert summary.requires_immediate_attention is True
        assert summary.is_fallback is False

    def test_missing_optional_fields_default(self):
        summary = Summary.model_validate({"summary": "x"})

        assert summary.severity == "medium"
        assert summary.complexity == "moderate"
        assert summary.key_points == []
        assert summary.suggested_actions == []
        assert summary.requires_immediate_attention is False

    def test_malformed_fields_default(self):
        summary = Summary.model_validate(
            {
                "summary": "x",
                "severity": "apocalyptic",
                "complexity": 3,
                "key_points": "not a list",
                "suggested_actions": None,
                "requires_immediate_attention": "yes",
            }
        )

        assert summary.severity == "medium"
        assert summary.complexity == "moderate"
        assert summary.key_points == []
        assert summary.suggested_actions == []
        assert summary.requires_immediate_attention is True

    def test_limits_applied(self):
        summary = Summary.model_validate(
            {
                "summary": "s" * 150,
                "key_points": [f"p{i}" for i in range(8)],
                "suggested_actions": ["a", "b", "c", "d"],
                "notes": "n" * 300,
            }
        )

        assert len(summary.summary) == 100
        assert len(summary.key_points) == 5
        assert summary.suggested_actions == ["a", "b", "c"]
        assert len(summary.notes) == 200

    @pytest.mark.parametrize("payload", [{}, {"summary": ""}, {"summary": None}, {"severity": "high"}])
    def test_summary_field_required(self, payload):
        with pytest.raises(Exception):
            Summary.model_validate(payload)


# ============================================================================
# SUMMARY SERVICE
# ============================================================================

class TestSummaryService:
    """请求构建与整体解析"""

    def test_prompt_embeds_record(self, record):
        resolution = AttachmentResolution(errors=["bad.pdf: 不支援的檔案類型"])
        prompt = build_user_prompt(record, resolution)

        assert "TICKET-1-001" in prompt
        assert "Cannot log in" in prompt
        assert "Error after password reset" in prompt
        assert "(critical)" in prompt
        assert "已上傳檔案: 0 個" in prompt
        assert "處理失敗檔案: 1 個" in prompt

    def test_request_uses_packaged_prompt(self, record):
        service = SummaryService(FakeLLM(), PromptService())
        request = service.build_request(record)

        assert '"severity"' in request.system_prompt
        assert "王小明" in request.user_prompt

    @pytest.mark.asyncio
    async def test_summarize_success(self, record):
        llm = FakeLLM()
        summary = await SummaryService(llm).summarize(record)

        assert summary.summary == AI_SUMMARY["summary"]
        assert summary.is_fallback is False
        assert len(llm.calls) == 1

    @pytest.mark.asyncio
    async def test_missing_summary_field_fails(self, record):
        payload = {k: v for k, v in AI_SUMMARY.items() if k != "summary"}

        with pytest.raises(SummarizationError):
            await SummaryService(FakeLLM(result=payload)).summarize(record)

    @pytest.mark.asyncio
    async def test_llm_error_wrapped(self, record):
        with pytest.raises(SummarizationError, match="AI 摘要调用失败"):
            await SummaryService(FakeLLM(error=RuntimeError("boom"))).summarize(record)

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self, record):
        class SlowLLM:
            async def complete_json(self, system_prompt, user_prompt):
                await asyncio.sleep(1)
                return AI_SUMMARY

        with pytest.raises(SummarizationError, match="超时"):
            await SummaryService(SlowLLM(), timeout=0.01).summarize(record)

    @pytest.mark.asyncio
    async def test_ai_cannot_claim_fallback(self, record):
        summary = await SummaryService(FakeLLM(result={**AI_SUMMARY, "is_fallback": True})).summarize(record)
        assert summary.is_fallback is False


# ============================================================================
# FALLBACK
# ============================================================================

class TestFallbackSummary:
    """仅依据记录生成的确定性摘要"""

    def test_scenario_is_critical_and_immediate(self, record):
        summary = build_fallback_summary(record)

        assert summary.severity == "critical"
        assert summary.requires_immediate_attention is True
        assert summary.summary == "🐛 Bug 回報: Cannot log in"
        assert summary.key_points == ["優先級: 🔥 緊急 (影響營運)", "影響範圍: 🌐 所有用戶"]
        assert summary.complexity == "moderate"
        assert summary.notes == FALLBACK_NOTE
        assert summary.is_fallback is True

    def test_non_urgent_label(self):
        record = normalize_submission(
            map_answers(make_event(**{"優先級": "💡 低 (建議改善)"})), lambda: "T"
        )
        summary = build_fallback_summary(record)

        assert summary.severity == "low"
        assert summary.requires_immediate_attention is False

    def test_unknown_urgent_label_flags_immediate(self):
        record = normalize_submission(map_answers(make_event(**{"優先級": "URGENT!!"})), lambda: "T")
        summary = build_fallback_summary(record)

        assert summary.severity == "medium"
        assert summary.requires_immediate_attention is True

    def test_deterministic(self, record):
        assert build_fallback_summary(record) == build_fallback_summary(record)


# ============================================================================
# LLM SERVICE
# ============================================================================

class TestLLMService:
    """从对话补全中提取 JSON"""

    @pytest.fixture
    def service(self, settings):
        return LLMService(settings.llm)

    def test_client_configuration(self, service):
        assert service.llm.temperature == 0.3
        assert service.llm.max_tokens == 1000
        assert service.llm.max_retries == 0

    @pytest.mark.parametrize(
        "text",
        [
            '{"summary": "ok"}',
            'Here you go:\n```json\n{"summary": "ok"}\n```',
            '```\n{"summary": "ok"}\n```',
        ],
    )
    @pytest.mark.asyncio
    async def test_complete_json(self, service, text):
        service.llm = SimpleNamespace(ainvoke=AsyncMock(return_value=SimpleNamespace(content=text)))

        assert await service.complete_json("sys", "user") == {"summary": "ok"}

    @pytest.mark.asyncio
    async def test_non_object_rejected(self, service):
        service.llm = SimpleNamespace(ainvoke=AsyncMock(return_value=SimpleNamespace(content="[1, 2]")))

        with pytest.raises(ValueError):
            await service.complete_json("sys", "user")

    @pytest.mark.asyncio
    async def test_garbage_rejected(self, service):
        service.llm = SimpleNamespace(ainvoke=AsyncMock(return_value=SimpleNamespace(content="sorry, no")))

        with pytest.raises(ValueError):
            await service.complete_json("sys", "user")
