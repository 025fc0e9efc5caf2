# inkblog/routes/topic.py

"""Topic routes."""

from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.dependencies import CurrentUserDep, TopicServiceDep
from inkblog.managers import limiter
from inkblog.schemas import BlogSummary, PageInfo, TopicDetail, TopicItem, TopicRequest

router = APIRouter(prefix="/topics", tags=["📚 Topics"])


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=PageInfo[TopicDetail],
    summary="Topic index",
    operation_id="topics_page",
)
async def topic_page(
    service: TopicServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
) -> PageInfo[TopicDetail]:
    """
    One page of topics, newest first.

    Returns
    -------
    PageInfo[TopicDetail]
        The first page is served from the cache for eight hours.
    """
    return await service.page(page)


@router.get(
    "/all",
    response_class=ORJSONResponse,
    response_model=list[TopicItem],
    summary="Every topic",
    operation_id="topics_all",
)
async def all_topics(service: TopicServiceDep) -> list[TopicItem]:
    return await service.list_all()


@router.get(
    "/user/{user_id}",
    response_class=ORJSONResponse,
    response_model=list[TopicDetail],
    summary="Topics of a user",
    operation_id="topics_by_user",
)
async def user_topics(user_id: int, service: TopicServiceDep) -> list[TopicDetail]:
    return await service.by_user(user_id)


@router.get(
    "/{topic_id}",
    response_class=ORJSONResponse,
    response_model=TopicItem,
    summary="Get a topic",
    operation_id="topics_get",
)
async def get_topic(topic_id: int, service: TopicServiceDep) -> TopicItem:
    return await service.get(topic_id)


@router.get(
    "/{topic_id}/blogs",
    response_class=ORJSONResponse,
    response_model=PageInfo[BlogSummary],
    summary="Blogs in a topic",
    operation_id="topics_blogs",
)
async def topic_blogs(
    topic_id: int,
    service: TopicServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
) -> PageInfo[BlogSummary]:
    return await service.blogs_of(topic_id, page)


@router.post(
    "/",
    response_class=ORJSONResponse,
    response_model=TopicItem,
    status_code=HTTP_201_CREATED,
    summary="Create a topic",
    operation_id="topics_create",
)
@limiter.limit("10/minute")
async def create_topic(
    request: Request,
    body: TopicRequest,
    user: CurrentUserDep,
    service: TopicServiceDep,
) -> TopicItem:
    return await service.create(body, user)
