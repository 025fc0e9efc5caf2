# inkblog/routes/category.py

"""Category routes: the cached list and admin creation."""

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.auth import AdminUserDep
from inkblog.dependencies import CategoryServiceDep
from inkblog.managers import limiter
from inkblog.schemas import CategoryItem, NameRequest

router = APIRouter(prefix="/categories", tags=["🗂️ Categories"])


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=list[CategoryItem],
    summary="List categories",
    operation_id="categories_list",
)
async def list_categories(service: CategoryServiceDep) -> list[CategoryItem]:
    return await service.list_all()


@router.post(
    "/",
    response_class=ORJSONResponse,
    response_model=CategoryItem,
    status_code=HTTP_201_CREATED,
    summary="Create a category",
    responses={
        409: {
            "description": "Name already taken",
            "content": {"application/json": {"example": {"detail": "CategoryDB named 'rust' already exists"}}},
        },
    },
    operation_id="categories_create",
)
@limiter.limit("10/minute")
async def create_category(
    request: Request,
    body: NameRequest,
    user: AdminUserDep,
    service: CategoryServiceDep,
) -> CategoryItem:
    """
    Create a category.

    Parameters
    ----------
    request : Request
        Current request context.
    body : NameRequest
        Category name.
    user : UserRecord
        Authenticated admin.
    service : CategoryService
        Category service.

    Returns
    -------
    CategoryItem
        The new category.
    """
    return await service.create(body.name)
