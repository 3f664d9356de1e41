import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..models import Admin, BlogPost, utcnow
from ..rate_limiter import blog_rate_limit
from ..security_utils import sanitize_html, sanitize_text
from ..shared.envelope import envelope
from ..shared.validators import validate_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["Blog"])


class BlogPostPayload(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    coverImageUrl: Optional[str] = None
    isPublished: Optional[bool] = None

    @field_validator("title", "excerpt")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v, max_length=500) if v is not None else v

    @field_validator("content")
    @classmethod
    def clean_content(cls, v):
        return sanitize_html(v) if v else v

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        # Empty means "not provided"; create reports the missing slug itself
        return validate_slug(v) if v else v


def _get_post_or_404(db: Session, blog_id: int) -> BlogPost:
    post = db.query(BlogPost).filter(BlogPost.id == blog_id).first()
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


def _ensure_unique_slug(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(BlogPost).filter(BlogPost.slug == slug)
    if exclude_id is not None:
        query = query.filter(BlogPost.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Blog slug must be unique")


@router.post("", status_code=201)
async def create_blog_post(
    data: BlogPostPayload,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(blog_rate_limit),
):
    if not data.title:
        raise HTTPException(status_code=400, detail="Blog title is required")
    if not data.slug:
        raise HTTPException(status_code=400, detail="Blog slug is required")
    if not data.content:
        raise HTTPException(status_code=400, detail="Blog content is required")

    _ensure_unique_slug(db, data.slug)

    post = BlogPost(
        title=data.title,
        slug=data.slug,
        excerpt=data.excerpt or None,
        content=data.content,
        cover_image_url=data.coverImageUrl or None,
        is_published=bool(data.isPublished),
        published_at=utcnow() if data.isPublished else None,
    )
    db.add(post)
    db.commit()
    db.refresh(post)

    logger.info(f"📝 Blog post {post.id} created ({post.slug}, published={post.is_published})")
    return envelope(True, post.to_dict())


@router.get("")
async def get_all_blog_posts(published: Optional[str] = None, db: Session = Depends(get_db)):
    """All posts, newest first; ?published=true|false filters on publish state"""
    query = db.query(BlogPost)
    if published is not None:
        query = query.filter(BlogPost.is_published == (published == "true"))
    posts = query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()
    return envelope(True, [p.to_dict() for p in posts])


@router.get("/slug/{slug}")
async def get_blog_post_by_slug(slug: str, db: Session = Depends(get_db)):
    try:
        slug = validate_slug(slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail="Blog post not found") from e

    post = db.query(BlogPost).filter(BlogPost.slug == slug, BlogPost.is_published.is_(True)).first()
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return envelope(True, post.to_dict())


@router.get("/{blog_id}")
async def get_blog_post(blog_id: int, db: Session = Depends(get_db)):
    return envelope(True, _get_post_or_404(db, blog_id).to_dict())


@router.put("/{blog_id}")
async def update_blog_post(
    blog_id: int,
    data: BlogPostPayload,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(blog_rate_limit),
):
    post = _get_post_or_404(db, blog_id)
    fields = data.model_fields_set

    if data.title:
        post.title = data.title
    if data.slug and data.slug != post.slug:
        _ensure_unique_slug(db, data.slug, exclude_id=post.id)
        post.slug = data.slug
    if "excerpt" in fields:
        post.excerpt = data.excerpt
    if data.content:
        post.content = data.content
    if "coverImageUrl" in fields:
        post.cover_image_url = data.coverImageUrl
    if data.isPublished is not None:
        post.is_published = data.isPublished
        # First publish stamps the date; unpublishing keeps it
        if data.isPublished and not post.published_at:
            post.published_at = utcnow()

    db.commit()
    db.refresh(post)
    logger.info(f"📝 Blog post {post.id} updated")
    return envelope(True, post.to_dict())


@router.delete("/{blog_id}")
async def delete_blog_post(
    blog_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(blog_rate_limit),
):
    post = _get_post_or_404(db, blog_id)
    db.delete(post)
    db.commit()
    logger.info(f"🗑️ Blog post {blog_id} deleted")
    return envelope(True, "Blog post deleted successfully")
