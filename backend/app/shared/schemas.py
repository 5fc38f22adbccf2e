# app/shared/schemas.py
"""
Base pydantic commune : snake_case côté Python, camelCase sur le fil.
Les payloads entrants acceptent les deux formes.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageOut(CamelModel):
    message: str


class PaginationOut(CamelModel):
    total:       int
    page:        int
    limit:       int
    total_pages: int


def paginate(total: int, page: int, limit: int) -> PaginationOut:
    return PaginationOut(
        total=total,
        page=page,
        limit=limit,
        total_pages=(total + limit - 1) // limit if limit else 0,
    )
