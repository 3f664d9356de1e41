import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..enums import MediaType
from ..models import Admin, Media
from ..rate_limiter import media_drive_rate_limit, media_rate_limit
from ..security_utils import sanitize_text
from ..services.storage_service import ALLOWED_IMAGE_TYPES, ALLOWED_VIDEO_TYPES, StorageService, get_storage
from ..shared.envelope import envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["Media"])


class DeleteMediaRequest(BaseModel):
    id: Optional[int] = None


def parse_tags(tag: str) -> list[str]:
    """Form tags arrive either as a JSON list string or as one bare tag"""
    try:
        parsed = json.loads(tag)
    except ValueError:
        parsed = [tag]
    if not isinstance(parsed, list):
        parsed = [parsed]
    return [t for t in (sanitize_text(str(item), max_length=100) for item in parsed) if t]


@router.get("")
async def get_all_media(
    tag: Optional[list[str]] = Query(None),
    type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Gallery media, newest first, optionally narrowed by tag(s) and type"""
    query = db.query(Media)
    if type:
        query = query.filter(Media.type == type)
    media = query.order_by(Media.id.desc()).all()

    if tag:
        wanted = set(tag)
        media = [m for m in media if wanted.intersection(m.tags or [])]

    return envelope(True, [m.to_dict() for m in media])


@router.post("/create", status_code=201)
async def add_media(
    file: Optional[UploadFile] = File(None),
    type: str = Form(MediaType.IMAGE.value),
    tag: Optional[str] = Form(None),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    _: None = Depends(media_rate_limit),
):
    if not file:
        raise HTTPException(status_code=400, detail="File is required")
    if not tag:
        raise HTTPException(status_code=400, detail="File tag required")
    if type not in [m.value for m in MediaType]:
        raise HTTPException(status_code=400, detail=f"Invalid media type: {type}")

    allowed = ALLOWED_IMAGE_TYPES if type == MediaType.IMAGE.value else ALLOWED_VIDEO_TYPES
    if file.content_type not in allowed:
        raise HTTPException(
            status_code=400, detail=f"Invalid file type. Allowed types: {', '.join(allowed)}"
        )

    tags = parse_tags(tag)
    if not tags:
        raise HTTPException(status_code=400, detail="File tag required")

    stored = storage.upload_file(await file.read(), file.content_type, folder=type.lower())
    media = Media(link=stored["publicUrl"], drive_id=stored["driveId"], tags=tags, type=type)
    db.add(media)
    db.commit()
    db.refresh(media)

    logger.info(f"📥 Media {media.id} ({type}) uploaded with tags {tags}")
    return envelope(True, media.to_dict())


@router.post("/delete")
async def delete_media(
    data: DeleteMediaRequest,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    _: None = Depends(media_rate_limit),
):
    if not data.id:
        raise HTTPException(status_code=400, detail="Invalid request argument")

    media = db.query(Media).filter(Media.id == data.id).first()
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")

    storage.delete_file(media.drive_id)
    db.delete(media)
    db.commit()

    logger.info(f"🗑️ Media {data.id} deleted")
    return envelope(True, "Media deleted")


@router.get("/drive/{file_id}")
async def serve_drive_file(
    file_id: str,
    storage: StorageService = Depends(get_storage),
    _: None = Depends(media_drive_rate_limit),
):
    """Proxy a stored object, used when no public storage URL is configured"""
    data, content_type = storage.get_file(file_id)
    return Response(
        content=data,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
