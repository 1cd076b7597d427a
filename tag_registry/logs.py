"""Operation logging for request handlers.

One LogContext per handled request: it carries the action, the entity the
request touches, a request id and the start time, and `write()` emits a single
line with the result and latency.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Optional

logger = logging.getLogger("tag_registry.operations")


class LogContext:
    def __init__(self, action: str):
        self.action = action
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid: str):
        self.entity_type = etype
        self.entity_id = eid

    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "payload": self.payload,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        level = {"OK": logging.INFO, "REJECTED": logging.WARNING}.get(result, logging.ERROR)
        logger.log(level, json.dumps(rec, ensure_ascii=False, default=str))


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
