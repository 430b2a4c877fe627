"""
Webhook endpoint for YooKassa payment notifications.

Always acknowledges handled and ignored events with 200; any failure is a
500 so that the gateway redelivers. Processing is idempotent, so
redelivery is safe.
"""
import json

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from myfocus.api.services.webhooks import WebhookService
from myfocus.core.exceptions import MalformedWebhookError, MyFocusException
from myfocus.db.session import get_session

router = APIRouter(tags=["webhooks"])
logger = structlog.get_logger(__name__)


@router.post("/yookassa-webhook")
async def yookassa_webhook(request: Request, session: Session = Depends(get_session)):
    """Handle a YooKassa notification envelope."""
    try:
        raw = await request.body()
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Invalid JSON payload", error=str(e))
            raise MalformedWebhookError("Invalid JSON payload")
        
        logger.info("Received YooKassa webhook", payload=payload)
        outcome = WebhookService(session).handle(payload)
        logger.info("Webhook handled", outcome=outcome.value)
        
        return {"received": True}
    
    except MyFocusException as e:
        logger.error("Error in yookassa-webhook", error=e.message)
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error("Error in yookassa-webhook", error=str(e))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
