# blogserver/core/slug.py

import re
from sqlalchemy.orm import Session
from blogserver.models.post import Post


_NON_ALNUM = re.compile(r"[^a-z0-9]+")

FALLBACK_SLUG = "post"


def generate_slug(title: str) -> str:
    """
    Lower-cases the title, collapses every run of non [a-z0-9] characters
    into a single '-', and trims '-' from both ends.
    """
    slug = _NON_ALNUM.sub("-", title.lower())
    return slug.strip("-")


def slug_exists(db: Session, slug: str) -> bool:
    return db.query(Post.id).filter(Post.slug == slug).first() is not None


def create_unique_slug(db: Session, title: str) -> str:
    """
    Returns the slug for `title`, suffixed with -1, -2, ... until no post
    uses it. One existence query per candidate.
    """
    base_slug = generate_slug(title) or FALLBACK_SLUG
    slug = base_slug
    counter = 1

    while slug_exists(db, slug):
        slug = f"{base_slug}-{counter}"
        counter += 1

    return slug
