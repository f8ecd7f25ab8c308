"""FastMCP server: thin wrapper exposing VideoService as MCP tools.

Besides the tools, two plain HTTP routes make up the storage boundary:
``POST /uploads/{token}`` receives the bytes for an upload slot and
``GET /files/{storage_id}`` serves them back.
"""

import logging

from fastmcp import FastMCP
from fastmcp.server.dependencies import get_http_headers
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from vidshare.config import settings
from vidshare.models import SortBy, VideoDetails
from vidshare.service import UnauthenticatedError, VideoService
from vidshare.storage.blobs import BlobNotFoundError, LocalBlobStore, UploadSlotError
from vidshare.storage.sqlite import SQLiteVideoRepository

logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="vidshare",
    instructions=(
        "vidshare is a small video catalog. Use list_videos and get_video "
        "to browse, increment_views when a video starts playing, and "
        "generate_upload_url + create_video to publish a new video."
    ),
)

_service: VideoService | None = None


def _get_service() -> VideoService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        settings.ensure_dirs()
        _service = VideoService(
            repository=SQLiteVideoRepository(),
            blobs=LocalBlobStore(),
        )
    return _service


def _current_user_id() -> str | None:
    """Identity of the caller: bearer token over HTTP, else the configured token."""
    headers = get_http_headers(include_all=True)
    auth = headers.get("authorization", "")
    token = auth[7:].strip() if auth.lower().startswith("bearer ") else settings.token
    return _get_service().authenticate(token)


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})
def generate_upload_url() -> dict:
    """Allocate a one-time upload URL. Requires a signed-in user.

    POST the raw file to the returned url with a Content-Type header;
    the response JSON carries the storageId to pass to create_video.
    """
    try:
        slot = _get_service().request_upload_slot(_current_user_id())
        return {"upload_url": slot.url}
    except UnauthenticatedError as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})
def create_video(
    title: str,
    description: str,
    storage_id: str,
    thumbnail_id: str | None = None,
) -> dict:
    """Publish a video from previously uploaded files. Requires a signed-in user.

    Args:
        title: Video title.
        description: Video description.
        storage_id: storageId returned by the video file upload.
        thumbnail_id: storageId returned by the thumbnail upload, if any.
    """
    try:
        video = _get_service().create_video(
            _current_user_id(),
            title=title,
            description=description,
            storage_id=storage_id,
            thumbnail_id=thumbnail_id,
        )
        return {"status": "created", "video_id": video.video_id}
    except (UnauthenticatedError, BlobNotFoundError) as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def get_video(video_id: str) -> dict | None:
    """Get a video with its uploader name and file URLs. Null if it does not exist.

    Args:
        video_id: The video ID.
    """
    video = _get_service().get_video(video_id)
    return _video_dict(video) if video else None


@mcp.tool(annotations={"readOnlyHint": True})
def list_videos(sort_by: SortBy = "recent", search_query: str | None = None) -> list[dict]:
    """List videos, newest first or most viewed first.

    Args:
        sort_by: "recent" or "views".
        search_query: Optional case-insensitive filter on title and description.
    """
    videos = _get_service().list_videos(sort_by, search_query)
    return [_video_dict(v) for v in videos]


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})
def increment_views(video_id: str) -> dict:
    """Count one view for a video. Unknown IDs are ignored.

    Args:
        video_id: The video ID.
    """
    _get_service().increment_views(video_id)
    return {"status": "ok", "video_id": video_id}


@mcp.custom_route("/uploads/{token}", methods=["POST"])
async def upload_file(request: Request) -> Response:
    """Receive the single upload for a slot."""
    token = request.path_params["token"]
    data = await request.body()
    content_type = request.headers.get("content-type", "application/octet-stream")
    try:
        storage_id = _get_service().store_upload(token, data, content_type)
    except UploadSlotError as e:
        logger.warning("Rejected upload: %s", e)
        return JSONResponse({"error": str(e)}, status_code=404)
    return JSONResponse({"storageId": storage_id})


@mcp.custom_route("/files/{storage_id}", methods=["GET"])
async def serve_file(request: Request) -> Response:
    """Serve a stored file with the content type it was uploaded with."""
    try:
        blob, data = _get_service().open_blob(request.path_params["storage_id"])
    except BlobNotFoundError as e:
        return JSONResponse({"error": str(e)}, status_code=404)
    return Response(content=data, media_type=blob.content_type)


def _video_dict(video: VideoDetails) -> dict:
    """Serialise a resolved video for tool responses."""
    return video.model_dump(mode="json")
