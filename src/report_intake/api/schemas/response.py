"""
API 响应模型
"""

from datetime import datetime
from pydantic import BaseModel, Field

from ...models import PipelineResult


class ReportAcceptedData(BaseModel):
    """提交受理数据"""

    event_id: str = Field(..., description="事件 ID")
    status: str = Field("accepted", description="受理状态")
    created_at: datetime = Field(..., description="受理时间")


class ReportAcceptedResponse(BaseModel):
    """提交受理响应"""

    code: int = Field(0, description="状态码 (0=成功, 非0=失败)")
    message: str = Field("回报已接收，将在后台处理", description="状态消息")
    data: ReportAcceptedData = Field(..., description="响应数据")


class ReportResultResponse(BaseModel):
    """同步处理响应"""

    code: int = Field(0, description="状态码 (0=已通知, 1=校验失败, 2=处理失败)")
    message: str = Field("success", description="状态消息")
    data: PipelineResult = Field(..., description="处理结果")


class HealthCheckResponse(BaseModel):
    """健康检查响应"""

    status: str = Field("healthy", description="健康状态")
    version: str = Field(..., description="版本号")
    timestamp: datetime = Field(..., description="时间戳")
