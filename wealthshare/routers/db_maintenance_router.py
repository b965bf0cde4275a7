# wealthshare/routers/db_maintenance_router.py
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from wealthshare.ledger.errors import PersistenceError, SnapshotError
from wealthshare.ledger.facade import Ledger
from wealthshare.utils.dependencies import get_ledger

router = APIRouter(prefix="/db", tags=["DB Maintenance"])


def _counts(ledger: Ledger) -> dict:
    log = ledger.log
    return {
        "members": len(log.members),
        "accounts": len(log.accounts),
        "loans": len(log.loans),
        "transactions": len(log.entries),
    }


# ------------------------------
# ✅ (1) Export: in-memory ledger -> download .json
# ------------------------------
@router.get("/export")
def export_snapshot(ledger: Ledger = Depends(get_ledger)):
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"wealthshare_backup_{ts}.json"

    return JSONResponse(
        ledger.export_snapshot(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ------------------------------
# ✅ (2) Import: upload .json -> wipe store, insert, reload
# ------------------------------
@router.post("/import")
async def import_snapshot(
        snapshot_file: UploadFile = File(...),
        ledger: Ledger = Depends(get_ledger),
):
    if not snapshot_file.filename or not snapshot_file.filename.lower().endswith(".json"):
        raise HTTPException(status_code=400, detail="Upload a .json file")

    content = await snapshot_file.read()
    try:
        ledger.import_snapshot(content)
    except SnapshotError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=f"Import failed: {e}")

    return {"message": "import completed", **_counts(ledger)}


# ------------------------------
# ✅ (3) Reset: wipe everything (danger zone)
# ------------------------------
@router.post("/reset")
def reset_database(ledger: Ledger = Depends(get_ledger)):
    try:
        ledger.reset()
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=f"Reset failed: {e}")
    return {"message": "all data wiped"}


# ------------------------------
# ✅ (4) Reload: pull the whole ledger back from the store
# ------------------------------
@router.post("/reload")
def reload_ledger(ledger: Ledger = Depends(get_ledger)):
    try:
        ledger.flush()
        ledger.reload()
    except SnapshotError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=f"Reload failed: {e}")

    return {"message": "reload completed", **_counts(ledger)}
