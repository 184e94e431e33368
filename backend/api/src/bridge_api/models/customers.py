"""API models for customer endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CreateCustomerRequest(BaseModel):
    """Optional details for a new Stripe customer."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"email": "guest@example.com", "name": "Jane Doe"},
                {},
            ]
        },
    )

    email: str | None = Field(default=None, max_length=512)
    name: str | None = Field(default=None, max_length=256)


class CustomerCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(
        ...,
        alias="customerId",
        description="Stripe customer ID",
        examples=["cus_Q1ABC123"],
    )
