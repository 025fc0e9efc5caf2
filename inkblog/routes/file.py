# inkblog/routes/file.py

"""File routes: uploads, de-duplication check and the user's own files."""

from typing import Annotated

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.dependencies import CurrentUserDep, FileServiceDep
from inkblog.managers import limiter
from inkblog.schemas import FileCheckRequest, FileCheckResponse, FileItem, PageInfo

router = APIRouter(prefix="/files", tags=["🖼️ Files"])


@router.post(
    "/",
    response_class=ORJSONResponse,
    response_model=FileItem,
    status_code=HTTP_201_CREATED,
    summary="Upload an image",
    responses={
        413: {
            "description": "File too large",
            "content": {
                "application/json": {
                    "example": {"detail": "File is too large. Please use a file smaller than 5MB."},
                },
            },
        },
        415: {
            "description": "Unsupported file type",
            "content": {"application/json": {"example": {"detail": "Unsupported file type: text/plain"}}},
        },
    },
    operation_id="files_upload",
)
@limiter.limit("20/minute")
async def upload_file(
    request: Request,
    file: Annotated[UploadFile, File(description="Image to upload")],
    user: CurrentUserDep,
    service: FileServiceDep,
) -> FileItem:
    """
    Upload an image for use in posts.

    Parameters
    ----------
    request : Request
        Current request context.
    file : UploadFile
        Uploaded image.
    user : UserRecord
        Authenticated uploader.
    service : FileService
        File service.

    Returns
    -------
    FileItem
        The stored file and its public URL.
    """
    data = await file.read()
    return await service.upload(user.id, file.filename or "upload", file.content_type, data)


@router.post(
    "/check",
    response_class=ORJSONResponse,
    response_model=FileCheckResponse,
    summary="Check whether content is already stored",
    operation_id="files_check",
)
async def check_file(
    body: FileCheckRequest,
    user: CurrentUserDep,
    service: FileServiceDep,
) -> FileCheckResponse:
    return await service.check(body.md5)


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=PageInfo[FileItem],
    summary="My files",
    operation_id="files_mine",
)
async def my_files(
    user: CurrentUserDep,
    service: FileServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
) -> PageInfo[FileItem]:
    return await service.mine(user.id, page)
