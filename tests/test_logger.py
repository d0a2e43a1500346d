"""
日志格式化测试
"""
import json
import logging

from report_intake.utils.logger import JSONFormatter, TicketLoggerAdapter


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_ticket_adapter_prefix_and_json_fields():
    logger = logging.getLogger("report_intake.tests.capture")
    logger.setLevel(logging.INFO)
    handler = _Capture()
    logger.addHandler(handler)
    try:
        TicketLoggerAdapter(logger, {"ticket_id": "TICKET-1-001", "stage": "notification"}).info("sent")
    finally:
        logger.removeHandler(handler)

    record = handler.records[0]
    assert record.getMessage() == "[TICKET-1-001] sent"

    data = json.loads(JSONFormatter().format(record))
    assert data["lvl"] == "INF"
    assert data["mod"] == "capture"
    assert data["ticket"] == "TICKET-1-001"
    assert data["stage"] == "notification"


def test_json_formatter_without_context():
    record = logging.LogRecord("report_intake.pipeline", logging.ERROR, __file__, 1, "boom", None, None)
    data = json.loads(JSONFormatter().format(record))

    assert data["msg"] == "boom"
    assert "ticket" not in data
