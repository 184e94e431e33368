"""API models for SetupIntent endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CreateSetupIntentRequest(BaseModel):
    """Request to start saving a card for a customer.

    ``customerId`` is optional at the schema level so a missing value is
    reported as a missing field rather than a validation error.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={"examples": [{"customerId": "cus_Q1ABC123"}]},
    )

    customer_id: str | None = Field(
        default=None,
        alias="customerId",
        max_length=255,
        description="Customer returned by /create-customer",
    )


class SetupIntentCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(
        ...,
        alias="clientSecret",
        description="Secret the frontend passes to Stripe.js to confirm setup",
    )
    setup_intent_id: str = Field(
        ...,
        alias="setupIntentId",
        examples=["seti_1ABC123"],
    )
