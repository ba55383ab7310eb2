from __future__ import annotations

import logging
from typing import List, Dict, Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from tourportal.core.db import get_db

logger = logging.getLogger("tourportal.api.health")
router = APIRouter()


@router.get("/ping")
def ping():
    logger.info("GET /health/ping")
    return {"ok": True}


@router.get("/db")
def db_health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"ok": True}


@router.get("/routes")
def list_routes(request: Request):
    """
    List every API route from the OpenAPI schema. Included routers do not
    expose their routes through app.routes on every FastAPI release.
    """
    paths = request.app.openapi().get("paths", {})
    out: List[Dict[str, Any]] = []
    for path, operations in paths.items():
        methods = sorted(m.upper() for m in operations)
        names = sorted(op.get("operationId", "") for op in operations.values())
        out.append({"path": path, "methods": methods, "name": names[0] if names else None})
    out.sort(key=lambda x: (x["path"], ",".join(x["methods"])))
    logger.info("GET /health/routes count=%d", len(out))
    return {"ok": True, "routes": out}
