"""Realtime relay of chat events between the members of a match."""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from app.db.session import AsyncSessionLocal
from app.services.credential_service import CredentialService
from app.realtime.rooms import RoomConnection, room_manager
from app.config.constants import REALTIME_PATH, FRAME_CONNECTION_ACK

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket(REALTIME_PATH)
async def realtime_endpoint(websocket: WebSocket):
    """
    Connect with `?token=<credential from /api/realtime/token>`.

    The connection is accepted even when the credential does not verify, so
    clients keep one reconnect path; such connections sit in the empty room
    and nothing they send is relayed.
    """
    await websocket.accept()

    params = websocket.query_params
    async with AsyncSessionLocal() as session:
        user_id, room_id = await CredentialService(session).resolve_connection(
            token=params.get("token"),
            legacy_user_id=params.get("userId"),
            legacy_match_id=params.get("matchId"),
        )

    connection = RoomConnection(websocket=websocket, user_id=user_id, room_id=room_id)
    room_manager.join(connection)
    logger.info(f"New realtime connection: user={user_id or '-'} room={room_id}")

    try:
        await websocket.send_json({
            "type": FRAME_CONNECTION_ACK,
            "matchId": room_id,
            "authenticated": connection.authenticated,
        })
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            room_manager.handle_frame(connection, raw)
    except WebSocketDisconnect:
        pass
    finally:
        room_manager.leave(connection)
        logger.info(f"Realtime connection closed: user={user_id or '-'} room={room_id}")
