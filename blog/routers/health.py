from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from blog.core.database import get_db, storage_guard

router = APIRouter()

@router.get("/z")
def healthz():
    # process is up
    return {"status": "ok"}

@router.get("/db")
def health_db(db: Session = Depends(get_db)):
    # one round trip to the store
    with storage_guard(db, "health check"):
        db.execute(text("SELECT 1"))
    return {"status": "ok"}
