from fastapi import APIRouter, Depends

from quluub import models
from quluub.api.errors import service_errors
from quluub.integrations import whereby
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/video", tags=["Video"])


@router.post("/create-meeting")
def create_meeting(current_user: models.User = Depends(get_current_user)):
    """Ad-hoc room that expires two hours from now."""
    with service_errors():
        meeting = whereby.create_meeting()
    return {
        "room_url": meeting.get("roomUrl"),
        "meeting_id": meeting.get("meetingId"),
        "end_date": meeting.get("endDate"),
    }
