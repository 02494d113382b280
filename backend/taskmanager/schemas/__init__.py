"""API Schemas — pydantic request/response models, one module per resource."""
