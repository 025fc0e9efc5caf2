# inkblog/routes/tag.py

"""Tag routes."""

from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.configs.settings import RANDOM_TAG_COUNT
from inkblog.dependencies import CurrentUserDep, TagServiceDep
from inkblog.managers import limiter
from inkblog.schemas import BlogSummary, NameRequest, PageInfo, TagItem

router = APIRouter(prefix="/tags", tags=["🏷️ Tags"])


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=list[TagItem],
    summary="List tags",
    operation_id="tags_list",
)
async def list_tags(service: TagServiceDep) -> list[TagItem]:
    return await service.list_all()


@router.get(
    "/random",
    response_class=ORJSONResponse,
    response_model=list[TagItem],
    summary="Random tags for the tag cloud",
    operation_id="tags_random",
)
async def random_tags(
    service: TagServiceDep,
    count: Annotated[int, Query(ge=1, le=50)] = RANDOM_TAG_COUNT,
) -> list[TagItem]:
    return await service.random(count)


@router.get(
    "/{tag_id}",
    response_class=ORJSONResponse,
    response_model=TagItem,
    summary="Get a tag",
    operation_id="tags_get",
)
async def get_tag(tag_id: int, service: TagServiceDep) -> TagItem:
    return await service.get(tag_id)


@router.get(
    "/{tag_id}/blogs",
    response_class=ORJSONResponse,
    response_model=PageInfo[BlogSummary],
    summary="Blogs with a tag",
    operation_id="tags_blogs",
)
async def tag_blogs(
    tag_id: int,
    service: TagServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
) -> PageInfo[BlogSummary]:
    return await service.blogs_of(tag_id, page)


@router.post(
    "/",
    response_class=ORJSONResponse,
    response_model=TagItem,
    status_code=HTTP_201_CREATED,
    summary="Create a tag",
    operation_id="tags_create",
)
@limiter.limit("10/minute")
async def create_tag(
    request: Request,
    body: NameRequest,
    user: CurrentUserDep,
    service: TagServiceDep,
) -> TagItem:
    """
    Create a tag. Any signed-in user may add tags while writing.

    Returns
    -------
    TagItem
        The new tag.
    """
    return await service.create(body.name)
