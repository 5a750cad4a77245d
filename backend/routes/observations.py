from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..db import HikeDatabase
from ..logs import LogContext
from ..services import observation_svc
from .deps import get_db

router = APIRouter()


class ObservationCreate(BaseModel):
    hike_id: int
    type: str  # wildlife/landmark/weather/other
    time: str  # ISO-8601 timestamp
    comment: str


@router.get("/api/hikes/{hike_id}/observations")
def api_observations_list(hike_id: int, db: HikeDatabase = Depends(get_db)):
    items = observation_svc.list_observations(db, hike_id)
    return {"total": len(items), "items": items}


@router.post("/api/observations/create", status_code=201)
def api_observation_create(body: ObservationCreate, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "CREATE_OBSERVATION")
    log.set_payload(body.model_dump())
    try:
        obs = observation_svc.add_observation(db, body.hike_id, body.type, body.time, body.comment, log)
        log.write("OK")
        return {"message": "ok", "observation": obs}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except LookupError as le:
        log.write("ERROR", str(le))
        raise HTTPException(status_code=404, detail=str(le))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/observations/{observation_id}/delete")
def api_observation_delete(observation_id: int, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "DELETE_OBSERVATION")
    try:
        observation_svc.delete_observation(db, observation_id, log)
        log.write("OK")
        return {"message": "ok"}
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
