"""API models for the frontend configuration endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class PublicConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    publishable_key: str = Field(
        ...,
        alias="publishableKey",
        description="Stripe publishable key for Stripe.js initialization",
        examples=["pk_test_abc123"],
    )
