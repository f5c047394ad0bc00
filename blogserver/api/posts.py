# blogserver/api/posts.py

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from blogserver.config import Settings
from blogserver.core import posts as repo
from blogserver.core.errors import NotFound, ValidationError
from blogserver.core.images import ImageUploader, read_image, resolve_image_url
from blogserver.core.slug import create_unique_slug
from blogserver.database import get_db
from blogserver.api.deps import (
    CurrentUser,
    get_session_user,
    get_settings,
    get_uploader,
    render,
    require_user,
)


router = APIRouter()


# -------------------------------
# Public pages
# -------------------------------

@router.get("/")
def home(
    request: Request,
    user: CurrentUser | None = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    suggested = repo.random_published(db, repo.FEED_SIZE)
    return render(request, "index.html", {"posts": suggested})


@router.get("/posts")
def all_posts(
    request: Request,
    user: CurrentUser | None = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    return render(request, "all-posts.html", {"posts": repo.list_published(db)})


@router.get("/posts/author/{author}")
def posts_by_author(
    author: str,
    request: Request,
    user: CurrentUser | None = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    posts = repo.list_by_author(db, author)
    return render(request, "all-posts.html", {"posts": posts, "author": author})


@router.get("/authors")
def authors(db: Session = Depends(get_db)):
    return repo.distinct_authors(db)


@router.get("/post/{slug}")
def single_post(
    slug: str,
    request: Request,
    user: CurrentUser | None = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    post = repo.find_by_slug(db, slug)
    if post is None:
        raise NotFound(f"No post at {slug!r}")

    repo.increment_views(db, slug)
    db.refresh(post)
    return render(request, "single-post.html", {"post": post})


# -------------------------------
# Owner pages
# -------------------------------

@router.get("/my-posts")
def my_posts(
    request: Request,
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    posts = repo.list_own_posts(db, user.username)
    return render(request, "all-posts.html", {"posts": posts, "author": user.username})


@router.get("/dashboard")
def dashboard(
    request: Request,
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        posts = repo.list_own_posts(db, user.username)
    except SQLAlchemyError:
        logger.exception("Error fetching dashboard data")
        return render(request, "dashboard.html", {"posts": [], "total_views": 0})

    return render(request, "dashboard.html", {
        "posts": posts,
        "total_views": repo.total_views(posts),
    })


@router.get("/admin/create")
def create_form(request: Request, user: CurrentUser = Depends(require_user)):
    return render(request, "create-post.html")


@router.post("/create-post")
async def create_post(
    request: Request,
    title: str = Form(""),
    content: str = Form(""),
    image: UploadFile | None = File(None),
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
    uploader: ImageUploader = Depends(get_uploader),
    settings: Settings = Depends(get_settings),
):
    data = None
    try:
        if not title.strip() or not content.strip():
            raise ValidationError("Title and content are required.")

        if image is not None and image.filename:
            data = await read_image(image)
    except ValidationError as e:
        context = {"error": e.message, "title": title, "content": content}
        return render(request, "create-post.html", context, status_code=e.status_code)

    # store calls leave the event loop; SQLite may wait on a lock
    slug = await run_in_threadpool(create_unique_slug, db, title)
    image_url = await resolve_image_url(uploader, data, settings.default_image_url)

    await run_in_threadpool(
        repo.create_post,
        db,
        title=title,
        content=content,
        author=user.username,
        slug=slug,
        image_url=image_url,
    )
    logger.info(f"{user.username} published {slug!r}")

    return RedirectResponse("/dashboard", status_code=303)
