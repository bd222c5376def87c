from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from app.models.user import User
from app.schemas.upload import UploadOut
from app.services.auth_service import get_current_user
from app.services.storage import UploadRejected, object_store

router = APIRouter(prefix='/uploads', tags=['uploads'])


@router.post('', response_model=UploadOut, status_code=status.HTTP_201_CREATED)
def upload_image(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
) -> UploadOut:
    try:
        key, mimetype, size = object_store.store(file.file, file.filename, file.content_type)
    except UploadRejected as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return UploadOut(key=key, url=object_store.public_url(key), content_type=mimetype, size=size)
