"""
Discord Webhook 消息构建

将标准化记录、摘要与附件结果渲染为 Webhook payload
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, List, Optional

from ..models import AttachmentResolution, Severity, SubmissionRecord, Summary
from ..models.report import truncate
from ..services.attachment_service import format_size

# Discord 限制
TITLE_LIMIT = 256
DESCRIPTION_LIMIT = 4096
FIELD_NAME_LIMIT = 256
FIELD_VALUE_LIMIT = 1024
MAX_FIELDS = 25
TOTAL_LIMIT = 6000
MIN_FIELD_LENGTH = 20

SEVERITY_COLORS = {
    Severity.CRITICAL: 0xFF0000,
    Severity.HIGH: 0xFF8C00,
    Severity.MEDIUM: 0xFFD700,
    Severity.LOW: 0x2ECC71,
}
SEVERITY_LABELS = {
    Severity.CRITICAL: "🔴 嚴重",
    Severity.HIGH: "🟠 高",
    Severity.MEDIUM: "🟡 中",
    Severity.LOW: "🟢 低",
}
COMPLEXITY_LABELS = {
    "simple": "簡單",
    "moderate": "中等",
    "complex": "複雜",
}
ATTACHMENT_COLOR = 0x5865F2
NOTES_COLOR = 0x95A5A6

FALLBACK_BANNER = "⚠️ AI 分析暫時無法使用，以下為系統依表單內容自動產生的摘要"

KEY_POINTS_FIELD = "📌 關鍵要點"
ACTIONS_FIELD = "✅ 建議處理"
DESCRIPTION_FIELD = "📝 問題描述"
TECHNICAL_FIELD = "🔧 技術細節"
ERRORS_FIELD = "⚠️ 處理錯誤"
VIDEO_FIELD = "🎬 影片連結"
DOCUMENT_FIELD = "📄 文件連結"
CUSTOMER_NOTES_FIELD = "客戶備註"
AI_NOTES_FIELD = "AI 補充說明"


@dataclass
class WebhookOptions:
    """Webhook 显示选项"""

    username: str = "客戶回報系統"
    avatar_url: Optional[str] = None
    urgent_mention: str = "@everyone"
    ticket_components: bool = False


def _field(name: str, value: str, inline: bool = False) -> Dict[str, Any]:
    return {
        "name": truncate(name, FIELD_NAME_LIMIT),
        "value": truncate(value, FIELD_VALUE_LIMIT),
        "inline": inline,
    }


def _lines(*pairs) -> str:
    return "\n".join(f"**{label}:** {value}" for label, value in pairs if value)


def is_urgent(summary: Summary) -> bool:
    return summary.severity == Severity.CRITICAL and summary.requires_immediate_attention


def _main_embed(record: SubmissionRecord, summary: Summary) -> Dict[str, Any]:
    description = summary.summary
    if summary.is_fallback:
        description = f"{FALLBACK_BANNER}\n\n{description}"

    fields: List[Dict[str, Any]] = []

    if summary.key_points:
        fields.append(_field(KEY_POINTS_FIELD, "\n".join(f"• {p}" for p in summary.key_points)))

    contact = _lines(
        ("姓名", record.name),
        ("Email", record.email),
        ("電話", record.phone),
        ("公司", record.company),
        ("偏好聯絡", record.preferred_contact),
    )
    if contact:
        fields.append(_field("👤 聯絡資訊", contact, inline=True))

    classification = _lines(
        ("類型", record.report_type.label),
        ("優先級", record.priority.label),
        ("影響範圍", record.impact_scope.label),
        ("嚴重程度", SEVERITY_LABELS.get(summary.severity, summary.severity)),
        ("類別", summary.category),
        ("複雜度", COMPLEXITY_LABELS.get(summary.complexity, summary.complexity)),
    )
    fields.append(_field("🏷️ 分類", classification, inline=True))

    if summary.suggested_actions:
        actions = "\n".join(f"{i}. {a}" for i, a in enumerate(summary.suggested_actions, 1))
        fields.append(_field(ACTIONS_FIELD, actions))

    if record.description:
        fields.append(_field(DESCRIPTION_FIELD, record.description))

    technical = []
    if record.reproduction_steps:
        technical.append(f"**重現步驟:**\n{record.reproduction_steps}")
    if record.environment:
        technical.append(f"**環境資訊:** {record.environment}")
    if record.error_message:
        technical.append(f"**錯誤訊息:**\n```\n{truncate(record.error_message, 500)}\n```")
    if technical:
        fields.append(_field(TECHNICAL_FIELD, "\n".join(technical)))

    timestamp = record.submitted_at or datetime.now(timezone.utc)
    source = "替代摘要" if summary.is_fallback else "AI 分析"

    return {
        "title": truncate(f"🎫 [{record.ticket_id}] {record.title}", TITLE_LIMIT),
        "description": truncate(description, DESCRIPTION_LIMIT),
        "color": SEVERITY_COLORS.get(summary.severity, SEVERITY_COLORS[Severity.MEDIUM]),
        "fields": fields[:MAX_FIELDS],
        "timestamp": timestamp.isoformat(),
        "footer": {"text": f"回報編號 {record.ticket_id} ・ {source}"},
    }


def _link_fields(record: SubmissionRecord) -> List[Dict[str, Any]]:
    fields = []
    if record.video_url:
        fields.append(_field(VIDEO_FIELD, record.video_url))
    if record.document_url:
        fields.append(_field(DOCUMENT_FIELD, record.document_url))
    return fields


def _attachment_embed(
    record: SubmissionRecord, resolution: AttachmentResolution
) -> Optional[Dict[str, Any]]:
    errors_field = (
        [_field(ERRORS_FIELD, "\n".join(f"• {e}" for e in resolution.errors))]
        if resolution.errors
        else []
    )

    if resolution.accepted:
        rows = [
            f"{i}. [{item.name}]({item.view_url}) ・ {format_size(item.size)} ・ [下載]({item.download_url})"
            for i, item in enumerate(resolution.accepted, 1)
        ]
        embed: Dict[str, Any] = {
            "title": f"📎 附件（{len(resolution.accepted)} 個，共 {format_size(resolution.total_size)}）",
            "description": truncate("\n".join(rows), DESCRIPTION_LIMIT),
            "color": ATTACHMENT_COLOR,
            "fields": _link_fields(record) + errors_field,
        }
        preview = next((item for item in resolution.accepted if item.is_image), None)
        if preview is not None:
            embed["image"] = {"url": preview.thumbnail_url or preview.view_url}
        return embed

    if record.has_reference_links or errors_field:
        return {
            "title": "🔗 相關連結" if record.has_reference_links else "📎 附件",
            "color": ATTACHMENT_COLOR,
            "fields": _link_fields(record) + errors_field,
        }

    return None


def _notes_embed(record: SubmissionRecord, summary: Summary) -> Optional[Dict[str, Any]]:
    fields = []
    if record.notes:
        fields.append(_field(CUSTOMER_NOTES_FIELD, record.notes))
    if summary.notes and not summary.is_fallback:
        fields.append(_field(AI_NOTES_FIELD, summary.notes))
    if not fields:
        return None
    return {"title": "🗒️ 備註", "color": NOTES_COLOR, "fields": fields}


def embed_length(embed: Dict[str, Any]) -> int:
    """按 Discord 规则统计 embed 文本长度（标题、描述、字段、页脚）"""
    total = len(embed.get("title", "")) + len(embed.get("description", ""))
    total += len(embed.get("footer", {}).get("text", ""))
    for field in embed.get("fields", []):
        total += len(field["name"]) + len(field["value"])
    return total


def _shrink_field(embed: Dict[str, Any], name: str, excess: int) -> None:
    fields = embed.get("fields", [])
    for i, field in enumerate(fields):
        if field["name"] != name:
            continue
        keep = len(field["value"]) - excess
        if keep < MIN_FIELD_LENGTH:
            del fields[i]
        else:
            field["value"] = truncate(field["value"], keep)
        return


def _shrink_rows(embed: Dict[str, Any], excess: int) -> None:
    # 附件清单按整行删除，避免截断 Markdown 链接
    description = embed.get("description", "")
    if not description:
        return
    target = len(description) - excess
    rows = description.split("\n")
    hidden = 0
    text = description
    while rows and len(text) > target:
        rows.pop()
        hidden += 1
        text = "\n".join(rows + [f"… 另有 {hidden} 個附件未列出"])
    embed["description"] = text


def _fit_total(
    main: Dict[str, Any],
    attachments: Optional[Dict[str, Any]],
    notes: Optional[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    压缩内容使全部 embed 合计不超过 Discord 的 6000 字符上限

    按优先级从低到高依次缩短或移除：备注、附件清单、处理错误、技术细节、
    问题描述、参考链接、建议处理、关键要点
    """
    steps = []
    if notes is not None:
        steps += [
            partial(_shrink_field, notes, AI_NOTES_FIELD),
            partial(_shrink_field, notes, CUSTOMER_NOTES_FIELD),
        ]
    if attachments is not None:
        steps += [
            partial(_shrink_rows, attachments),
            partial(_shrink_field, attachments, ERRORS_FIELD),
        ]
    steps += [
        partial(_shrink_field, main, TECHNICAL_FIELD),
        partial(_shrink_field, main, DESCRIPTION_FIELD),
    ]
    if attachments is not None:
        steps += [
            partial(_shrink_field, attachments, DOCUMENT_FIELD),
            partial(_shrink_field, attachments, VIDEO_FIELD),
        ]
    steps += [
        partial(_shrink_field, main, ACTIONS_FIELD),
        partial(_shrink_field, main, KEY_POINTS_FIELD),
    ]

    embeds = [embed for embed in (main, attachments, notes) if embed is not None]
    for step in steps:
        excess = sum(embed_length(embed) for embed in embeds) - TOTAL_LIMIT
        if excess <= 0:
            break
        step(excess)

    if notes is not None and not notes["fields"]:
        embeds.remove(notes)
    return embeds


def build_webhook_payload(
    record: SubmissionRecord,
    summary: Summary,
    resolution: Optional[AttachmentResolution] = None,
    options: Optional[WebhookOptions] = None,
) -> Dict[str, Any]:
    """
    构建 Discord Webhook payload

    Args:
        record: 标准化后的记录（需带工单编号）
        summary: AI 摘要或替代摘要
        resolution: 附件处理结果
        options: 显示选项

    Returns:
        可直接 POST 的 JSON 对象
    """
    resolution = resolution or AttachmentResolution()
    options = options or WebhookOptions()

    embeds = _fit_total(
        _main_embed(record, summary),
        _attachment_embed(record, resolution),
        _notes_embed(record, summary),
    )

    payload: Dict[str, Any] = {"username": options.username, "embeds": embeds}

    if options.avatar_url:
        payload["avatar_url"] = options.avatar_url

    if is_urgent(summary):
        payload["content"] = f"{options.urgent_mention} 🚨 **緊急回報，請立即處理！** ({record.ticket_id})".strip()
        payload["allowed_mentions"] = {"parse": ["everyone", "roles", "users"]}

    if options.ticket_components:
        payload["components"] = [
            {
                "type": 1,
                "components": [
                    {
                        "type": 2,
                        "style": 1,
                        "label": "確認處理",
                        "custom_id": f"ack:{record.ticket_id}",
                    }
                ],
            }
        ]

    return payload
