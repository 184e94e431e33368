"""API-specific request/response models.

Field names are snake_case in Python and camelCase on the wire (aliases),
matching what the browser client sends and expects.

Modules:
- common: Error body re-export and request body validation
- customers: Customer creation request/response
- setup_intents: SetupIntent creation request/response
- webhooks: Webhook acknowledgment
- config: Frontend configuration response
"""

__all__: list[str] = []
