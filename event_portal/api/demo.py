from fastapi import APIRouter, Depends

from event_portal.dependencies import get_clock, get_repos
from event_portal.services.demo_loader import seed_demo_data

router = APIRouter(tags=["demo"])


@router.post("/load")
def load_demo(repos=Depends(get_repos), clock=Depends(get_clock)):
    summary = seed_demo_data(repos, clock=clock)
    return {"status": "loaded", "summary": summary}
