import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import update
from sqlalchemy.orm import Session

from oms.core.rbac import Role, require_roles
from oms.core.security import get_current_user
from oms.db.session import get_db
from oms.models.user import User
from oms.models.welcome_video import WelcomeVideo
from oms.schemas.common import MessageOut
from oms.schemas.welcome_video import WelcomeVideoIn, WelcomeVideoOut

router = APIRouter(prefix="/welcome-video", tags=["welcome-video"])


def video_to_out(v: WelcomeVideo) -> WelcomeVideoOut:
    return WelcomeVideoOut(
        id=str(v.id),
        title=v.title,
        description=v.description,
        youtube_url=v.youtube_url,
        is_active=v.is_active,
        created_by_email=v.created_by.email if v.created_by else None,
        created_at=v.created_at,
        updated_at=v.updated_at,
    )


def deactivate_all(db: Session) -> None:
    # At most one video is active
    db.execute(update(WelcomeVideo).values(is_active=False).execution_options(synchronize_session="fetch"))


@router.get("/active", response_model=WelcomeVideoOut | None)
def active_video(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    v = (
        db.query(WelcomeVideo)
        .filter(WelcomeVideo.is_active.is_(True))
        .order_by(WelcomeVideo.created_at.desc())
        .first()
    )
    return video_to_out(v) if v else None


@router.get("", response_model=list[WelcomeVideoOut])
def list_videos(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    videos = db.query(WelcomeVideo).order_by(WelcomeVideo.created_at.desc()).all()
    return [video_to_out(v) for v in videos]


@router.post("", response_model=WelcomeVideoOut, status_code=201)
def create_video(
    payload: WelcomeVideoIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    if payload.is_active:
        deactivate_all(db)
    v = WelcomeVideo(
        title=payload.title,
        description=payload.description,
        youtube_url=str(payload.youtube_url),
        is_active=payload.is_active,
        created_by_user_id=current_user.id,
    )
    db.add(v)
    db.commit()
    db.refresh(v)
    return video_to_out(v)


@router.put("/{video_id}", response_model=WelcomeVideoOut)
def update_video(
    video_id: uuid.UUID,
    payload: WelcomeVideoIn,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    v = db.get(WelcomeVideo, video_id)
    if not v:
        raise HTTPException(status_code=404, detail="Video not found")
    if payload.is_active:
        deactivate_all(db)
    v.title = payload.title
    v.description = payload.description
    v.youtube_url = str(payload.youtube_url)
    v.is_active = payload.is_active
    db.commit()
    db.refresh(v)
    return video_to_out(v)


@router.delete("/{video_id}", response_model=MessageOut)
def delete_video(
    video_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    v = db.get(WelcomeVideo, video_id)
    if not v:
        raise HTTPException(status_code=404, detail="Video not found")
    db.delete(v)
    db.commit()
    return MessageOut(message="Video deleted successfully")
