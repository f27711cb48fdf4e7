"""
Applications webhook.

Receives application form submissions from the intake form provider.
"""

from fastapi import APIRouter, Depends

from network_brain.clients import ServiceClients, get_clients
from network_brain.errors import NetworkBrainError, UpstreamError
from network_brain.logging_config import logger
from network_brain.services.applications import ApplicationPayload, ApplicationService

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.post("/webhook")
async def application_webhook(
    payload: ApplicationPayload,
    clients: ServiceClients = Depends(get_clients)
):
    """
    Store an application.

    Upserts the applicant by email and marks them `applied` in the
    applications community. `name` and `email` are required, either as
    top-level fields or as transcript answers.
    """
    logger.info(f"[WEBHOOK] Received application (schema v{payload.schema_version})")
    service = ApplicationService(clients.supabase, clients.settings)

    try:
        person = service.process(payload)
    except NetworkBrainError:
        raise
    except Exception as e:
        logger.exception("[WEBHOOK] Application webhook error")
        raise UpstreamError("Failed to process application") from e

    return {
        "success": True,
        "message": "Application received and processed",
        "data": person
    }
