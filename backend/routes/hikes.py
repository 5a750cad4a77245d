from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import HikeDatabase
from ..logs import LogContext
from ..services import hike_svc
from .deps import get_db

router = APIRouter()

_DATE = r"^\d{4}-\d{2}-\d{2}$"


class HikeCreate(BaseModel):
    user_id: int
    name: str
    location: str
    date: str  # YYYY-MM-DD
    length: Union[str, int, float]  # free text, leading number is the distance
    difficulty: str  # easy/moderate/hard
    parking_available: bool = False
    description: str = ""
    duration: str


class HikeUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    length: Optional[Union[str, int, float]] = None
    difficulty: Optional[str] = None
    parking_available: Optional[bool] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    completed: Optional[bool] = None


@router.get("/api/hikes")
def api_hikes_list(user_id: int, with_observations: bool = True, db: HikeDatabase = Depends(get_db)):
    items = hike_svc.list_hikes(db, user_id, with_observations=with_observations)
    return {"total": len(items), "items": items}


@router.get("/api/hikes/search")
def api_hikes_search(
    user_id: int,
    q: str | None = None,
    name: str | None = None,
    location: str | None = None,
    min_length: float | None = None,
    max_length: float | None = None,
    date_from: str | None = Query(None, pattern=_DATE),
    date_to: str | None = Query(None, pattern=_DATE),
    difficulty: str | None = None,
    status: str | None = None,
    db: HikeDatabase = Depends(get_db),
):
    try:
        items = hike_svc.search_hikes(
            db, user_id, q,
            name=name, location=location,
            min_length=min_length, max_length=max_length,
            date_from=date_from, date_to=date_to,
            difficulty=difficulty, status=status,
        )
        return {"total": len(items), "items": items}
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))


@router.get("/api/hikes/{hike_id}")
def api_hike_get(hike_id: int, db: HikeDatabase = Depends(get_db)):
    hike = hike_svc.get_hike(db, hike_id)
    if not hike:
        raise HTTPException(status_code=404, detail="hike_not_found")
    return hike


@router.post("/api/hikes/create", status_code=201)
def api_hike_create(body: HikeCreate, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "CREATE_HIKE", user=str(body.user_id))
    payload = body.model_dump()
    log.set_payload(payload)
    try:
        hike = hike_svc.add_hike(db, body.user_id, payload, log)
        log.write("OK")
        return {"message": "ok", "hike": hike}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except LookupError as le:
        log.write("ERROR", str(le))
        raise HTTPException(status_code=404, detail=str(le))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/hikes/{hike_id}/update")
def api_hike_update(hike_id: int, body: HikeUpdate, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "UPDATE_HIKE")
    # only what the client actually sent
    updates = body.model_dump(exclude_unset=True)
    log.set_payload(updates)
    try:
        hike = hike_svc.update_hike(db, hike_id, updates, log)
        log.write("OK")
        return {"message": "ok", "hike": hike}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except LookupError as le:
        log.write("ERROR", str(le))
        raise HTTPException(status_code=404, detail=str(le))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/hikes/{hike_id}/complete")
def api_hike_complete(hike_id: int, completed: bool = Body(True, embed=True), db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "COMPLETE_HIKE")
    log.set_payload({"completed": completed})
    try:
        hike = hike_svc.set_completed(db, hike_id, completed, log)
        log.write("OK")
        return {"message": "ok", "hike": hike}
    except LookupError as le:
        log.write("ERROR", str(le))
        raise HTTPException(status_code=404, detail=str(le))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/hikes/{hike_id}/delete")
def api_hike_delete(hike_id: int, db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "DELETE_HIKE")
    try:
        hike_svc.delete_hike(db, hike_id, log)
        log.write("OK")
        return {"message": "ok"}
    except LookupError as le:
        log.write("ERROR", str(le))
        raise HTTPException(status_code=404, detail=str(le))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/hikes/delete_all")
def api_hikes_delete_all(user_id: int = Body(..., embed=True), db: HikeDatabase = Depends(get_db)):
    log = LogContext(db, "DELETE_ALL_HIKES", user=str(user_id))
    try:
        deleted = hike_svc.delete_all_hikes(db, user_id, log)
        log.write("OK")
        return {"message": "ok", "deleted": deleted}
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
