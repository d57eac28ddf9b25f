"""
LinkUp Backend: Link Schemas
==============================

What:  Request and response models for /link and /unlink.

Identifiers are accepted as plain strings: a malformed identifier is a
"does not resolve" case handled by the service (404), not a schema error.
The link body keeps its historical field names, `user_id` and `userId`,
which is why it does not use the camelCase alias generator.
"""

import uuid

from pydantic import BaseModel, Field


class LinkRequest(BaseModel):
    user_id: str = Field(min_length=1, description="First user of the ordered pair")
    linked_user_id: str = Field(
        min_length=1,
        alias="userId",
        description="Second user of the ordered pair",
    )

    model_config = {"populate_by_name": True}


class LinkResponse(BaseModel):
    message: str = Field(default="Link created successfully")
    link_id: uuid.UUID = Field(serialization_alias="linkId")


class UnlinkRequest(BaseModel):
    link_id: str = Field(min_length=1, alias="linkId")

    model_config = {"populate_by_name": True}


class UnlinkResponse(BaseModel):
    message: str = Field(default="User unlinked successfully")
