"""
API 请求模型
"""

from ...models import FormEvent


class ReportSubmitRequest(FormEvent):
    """表单提交请求"""

    model_config = {
        "json_schema_extra": {
            "example": {
                "answers": {
                    "姓名": "王小明",
                    "電子郵件": "ming@example.com",
                    "偏好聯絡方式": "📧 Email",
                    "問題類型": "🐛 Bug 回報",
                    "優先級": "🔥 緊急 (影響營運)",
                    "影響範圍": "🌐 所有用戶",
                    "問題標題": "Cannot log in",
                    "問題描述": "Error after password reset",
                    "附件上傳": ["uploads/2026/10/screenshot.png"],
                },
                "metadata": {
                    "submitted_at": "2026-10-19T08:30:00+08:00",
                    "source": "customer-report-form",
                    "row_index": 42,
                },
            }
        }
    }
