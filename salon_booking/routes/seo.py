"""Health check, sitemap and robots.txt, mounted at the site root"""

import logging
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from .. import config
from ..database import get_db
from ..models import BlogPost

logger = logging.getLogger(__name__)

router = APIRouter(tags=["SEO"])

STATIC_ROUTES = [
    "/",
    "/blog",
    "/policy",
    "/booking/create",
    "/booking/find",
    "/showroom",
]


def _url_entry(path: str, lastmod: Optional[str] = None) -> str:
    loc = f"{config.SITE_URL}{'' if path == '/' else path}"
    entry = f"<url><loc>{escape(loc)}</loc>"
    if lastmod:
        entry += f"<lastmod>{lastmod}</lastmod>"
    return entry + "</url>"


@router.get("/ping")
async def ping():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/sitemap.xml")
async def sitemap(db: Session = Depends(get_db)):
    posts = (
        db.query(BlogPost)
        .filter(BlogPost.is_published.is_(True))
        .order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
        .all()
    )

    urls = [_url_entry(path) for path in STATIC_ROUTES]
    for post in posts:
        lastmod = post.updated_at.date().isoformat() if post.updated_at else None
        urls.append(_url_entry(f"/blog/{post.slug}", lastmod))

    logger.debug(f"Sitemap built with {len(urls)} urls")
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{''.join(urls)}\n"
        "</urlset>"
    )
    return Response(content=xml, media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    lines = [
        "User-agent: *",
        "Allow: /",
        "Disallow: /admin",
        "Disallow: /api",
        "Disallow: /user",
        f"Sitemap: {config.SITE_URL}/sitemap.xml",
    ]
    return "\n".join(lines)
