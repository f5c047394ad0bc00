# blogserver/core/posts.py

import random
from typing import Iterable
from sqlalchemy.orm import Session
from blogserver.models.post import Post, PUBLISHED


FEED_SIZE = 5


def create_post(
    db: Session,
    *,
    title: str,
    content: str,
    author: str,
    slug: str,
    image_url: str,
    status: str = PUBLISHED,
) -> Post:
    post = Post(
        title=title,
        content=content,
        author=author,
        slug=slug,
        image_url=image_url,
        views=0,
        status=status,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def find_by_slug(db: Session, slug: str) -> Post | None:
    return db.query(Post).filter_by(slug=slug, status=PUBLISHED).first()


def list_published(db: Session) -> list[Post]:
    return (
        db.query(Post)
        .filter_by(status=PUBLISHED)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def list_by_author(db: Session, author: str) -> list[Post]:
    return (
        db.query(Post)
        .filter_by(author=author, status=PUBLISHED)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def list_own_posts(db: Session, author: str) -> list[Post]:
    """
    Every post of `author` regardless of status. Only for the owner's views.
    """
    return (
        db.query(Post)
        .filter_by(author=author)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def distinct_authors(db: Session) -> list[str]:
    rows = (
        db.query(Post.author)
        .filter_by(status=PUBLISHED)
        .distinct()
        .order_by(Post.author.asc())
        .all()
    )
    return [r.author for r in rows]


def random_published(db: Session, k: int = FEED_SIZE) -> list[Post]:
    posts = list_published(db)
    return random.sample(posts, min(k, len(posts)))


def total_views(posts: Iterable[Post]) -> int:
    return sum(post.views or 0 for post in posts)


def increment_views(db: Session, slug: str) -> int | None:
    """
    Adds one view in a single UPDATE so concurrent readers cannot lose
    increments. Returns the new count, or None if no published post matches.
    """
    updated = (
        db.query(Post)
        .filter_by(slug=slug, status=PUBLISHED)
        .update({Post.views: Post.views + 1}, synchronize_session=False)
    )
    db.commit()
    if not updated:
        return None

    return db.query(Post.views).filter_by(slug=slug).scalar()
