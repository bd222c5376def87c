import json
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from app.models.user import User
from app.services.auth_service import get_current_user
from app.services.change_feed import ENTITIES, change_feed

router = APIRouter(prefix='/changes', tags=['changes'])

KEEPALIVE_SECONDS = 15.0


@router.get('/{entity}')
async def watch_changes(
    entity: str,
    request: Request,
    user: User = Depends(get_current_user),
):
    if entity not in ENTITIES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Unknown entity')

    async def event_stream():
        subscription = change_feed.subscribe(entity)
        try:
            yield f"data: {json.dumps({'type': 'subscribed', 'entity': entity}, ensure_ascii=False)}\n\n"
            while not await request.is_disconnected():
                item = await subscription.get(timeout=KEEPALIVE_SECONDS)
                if item is None:
                    yield ': keep-alive\n\n'
                    continue
                yield f"data: {json.dumps(item, ensure_ascii=False)}\n\n"
        finally:
            change_feed.unsubscribe(subscription)

    return StreamingResponse(event_stream(), media_type='text/event-stream')
