"""CLI interface: thin wrapper over VideoService, the catalog/player views and the server."""

from pathlib import Path

import typer

from vidshare.catalog import CatalogView, http_uploader, local_uploader
from vidshare.config import settings
from vidshare.models import VideoDetails
from vidshare.player import MetadataLoaded, PlayerView, Played
from vidshare.service import SORT_MODES, VideoService
from vidshare.storage.blobs import LocalBlobStore
from vidshare.storage.sqlite import SQLiteVideoRepository


app = typer.Typer(
    name="vidshare",
    help="Upload, browse and watch videos in a small shared catalog.",
    no_args_is_help=True,
)

_ICONS = {"info": "ℹ️ ", "success": "✅", "error": "❌"}


def _get_service() -> VideoService:
    """Create a service instance with default dependencies."""
    settings.ensure_dirs()
    return VideoService(
        repository=SQLiteVideoRepository(),
        blobs=LocalBlobStore(),
    )


def _catalog(svc: VideoService, token: str | None = None, via_http: bool = False) -> CatalogView:
    return CatalogView(
        service=svc,
        user_id=svc.authenticate(token),
        uploader=http_uploader() if via_http else local_uploader(svc),
    )


def _print_notices(view: CatalogView) -> None:
    for notice in view.notices:
        typer.echo(f"{_ICONS[notice.level]} {notice.message}", err=notice.level == "error")
    view.notices.clear()


def _print_row(i: int, v: VideoDetails) -> None:
    typer.echo(f"  {i}. {v.video_id}  {v.views:>6d} views  {v.username:<24s}  {v.title}")


@app.command()
def user_add(email: str | None = typer.Argument(None, help="Email shown as the uploader name.")) -> None:
    """Register a user and print their access token."""
    user = _get_service().register_user(email)
    typer.echo(f"👤 Registered: {user.display_name}")
    typer.echo(f"   ID:    {user.user_id}")
    typer.echo(f"   Token: {user.token}")
    typer.echo("   Export it as VIDSHARE_TOKEN or pass --token.")


@app.command(name="list")
def list_videos(
    sort: str = typer.Option("recent", "--sort", "-s", help="Sort order: recent or views."),
    search: str | None = typer.Option(None, "--search", "-q", help="Filter by title or description."),
) -> None:
    """List videos in the catalog."""
    if sort not in SORT_MODES:
        typer.echo(f"❌ Unknown sort mode: {sort}. Use one of: {', '.join(SORT_MODES)}", err=True)
        raise typer.Exit(code=1)

    view = _catalog(_get_service())
    view.sort_by = sort
    if search:
        corrected = view.submit_search(search)
        _print_notices(view)
        if corrected != search:
            typer.echo(f"   Searching for: {corrected}")
    else:
        view.refresh()

    if not view.videos:
        typer.echo("No videos found.")
        return
    for i, v in enumerate(view.videos, 1):
        _print_row(i, v)


@app.command()
def info(video_id: str = typer.Argument(..., help="Video ID.")) -> None:
    """Show full details for a video."""
    video = _get_service().get_video(video_id)
    if video is None:
        typer.echo(f"❌ Video not found: {video_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Title:       {video.title}")
    typer.echo(f"Uploader:    {video.username}")
    typer.echo(f"Views:       {video.views}")
    typer.echo(f"URL:         {video.url or '(unavailable)'}")
    typer.echo(f"Thumbnail:   {video.thumbnail_url or '(none)'}")
    typer.echo(f"Added:       {video.created_at or '(unknown)'}")
    typer.echo(f"\n{video.description}")


@app.command()
def upload(
    video_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file to upload."),
    title: str = typer.Option(..., "--title", "-t", help="Video title."),
    description: str = typer.Option(..., "--description", "-d", help="Video description."),
    thumbnail: Path | None = typer.Option(
        None, "--thumbnail", exists=True, dir_okay=False, help="Optional thumbnail image."
    ),
    token: str | None = typer.Option(None, "--token", help="Access token (defaults to VIDSHARE_TOKEN)."),
    via_http: bool = typer.Option(
        False, "--http", help="Send files to the running server's upload URLs instead of writing them directly."
    ),
) -> None:
    """Upload a video with an optional thumbnail."""
    view = _catalog(_get_service(), token or settings.token, via_http)
    ok = view.upload(title, description, video_file, thumbnail)
    _print_notices(view)
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def watch(
    video_id: str = typer.Argument(..., help="Video ID."),
    duration: float = typer.Option(0.0, "--duration", help="Known duration in seconds, for display."),
    open_browser: bool = typer.Option(True, "--open/--no-open", help="Open the video URL in a browser."),
) -> None:
    """Play a video: opens its URL and counts one view."""
    svc = _get_service()
    video = svc.get_video(video_id)
    if video is None:
        typer.echo(f"❌ Video not found: {video_id}", err=True)
        raise typer.Exit(code=1)

    player = PlayerView(video.video_id, increment_views=svc.increment_views)
    if duration:
        player.dispatch(MetadataLoaded(duration=duration))
    if open_browser and video.url:
        typer.launch(video.url)
    player.dispatch(Played())

    typer.echo(f"▶️  {video.title}  ({video.username})")
    watched = svc.get_video(video_id)
    typer.echo(f"   {player.state.time_label}  {video.url or '(unavailable)'}")
    typer.echo(f"   Views: {watched.views if watched else video.views}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the vidshare MCP server (upload and file routes are HTTP only)."""
    # public_url follows these unless base_url is set
    settings.host = host
    settings.port = port
    from vidshare.server import mcp

    if stdio:
        typer.echo("Starting vidshare MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting vidshare MCP server on http://{host}:{port}/mcp")
        mcp.run(transport="streamable-http", host=host, port=port)
