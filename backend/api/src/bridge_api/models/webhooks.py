"""API models for webhook endpoints."""

from pydantic import BaseModel


class WebhookAck(BaseModel):
    """Acknowledgment returned for every verified delivery."""

    received: bool = True
