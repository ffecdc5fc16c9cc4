"""Schemas shared by several routers."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Request/response envelope with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(ApiModel):
    """Paging info; ``total`` is the size of the returned page."""

    limit: int
    offset: int
    total: int
