"""
客户回报相关 API 路由
"""

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from ...models import FormEvent
from ...pipeline import ReportPipeline
from ...utils.logger import get_logger
from ..schemas.request import ReportSubmitRequest
from ..schemas.response import ReportAcceptedData, ReportAcceptedResponse, ReportResultResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])

RESULT_CODES = {"delivered": 0, "rejected": 1, "failed": 2}


def get_pipeline(request: Request) -> ReportPipeline:
    return request.app.state.pipeline


@router.post("", response_model=ReportAcceptedResponse)
async def submit_report(
    request: ReportSubmitRequest,
    background_tasks: BackgroundTasks,
    pipeline: ReportPipeline = Depends(get_pipeline),
):
    """
    提交客户回报（异步处理）

    立即返回事件 ID，后台执行完整流水线
    """
    event_id = f"evt-{datetime.now(timezone.utc).strftime('%Y%m%d')}-{uuid.uuid4().hex[:8]}"
    logger.info(f"[{event_id}] 收到回报提交")

    event = FormEvent.model_validate(request.model_dump())
    background_tasks.add_task(process_report, pipeline, event_id, event)

    return ReportAcceptedResponse(
        data=ReportAcceptedData(
            event_id=event_id,
            status="accepted",
            created_at=datetime.now(timezone.utc),
        )
    )


@router.post("/sync", response_model=ReportResultResponse)
async def submit_report_sync(
    request: ReportSubmitRequest,
    pipeline: ReportPipeline = Depends(get_pipeline),
):
    """
    提交客户回报（同步处理）

    等待流水线完成并返回处理结果
    """
    event = FormEvent.model_validate(request.model_dump())
    result = await pipeline.process(event)
    return ReportResultResponse(
        code=RESULT_CODES[result.status],
        message=result.status,
        data=result,
    )


async def process_report(pipeline: ReportPipeline, event_id: str, event: FormEvent) -> None:
    """
    后台处理回报

    Args:
        pipeline: 流水线
        event_id: 事件 ID
        event: 表单提交事件
    """
    logger.info(f"[{event_id}] 开始处理回报")
    result = await pipeline.process(event)
    logger.info(f"[{event_id}] 处理结束: status={result.status}, ticket={result.ticket_id}")
