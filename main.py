import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List, Optional
from pymongo.errors import PyMongoError

import database
from donors import clear_donors, create_donor, list_donors, serialize_donor
from exceptions import DonorError
from schemas import BLOOD_GROUPS, ClearResult, Donor, DonorCreate, ValidationReport
from validation import check_donor

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        database.ensure_indexes()
    except PyMongoError:
        logger.exception("Could not prepare donor indexes; registrations retry before inserting")
    yield


app = FastAPI(title="Blood Donor Registry API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- Error responses -----------------

@app.exception_handler(DonorError)
async def donor_error_handler(request: Request, exc: DonorError):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        messages.append(f"{loc[-1]}: {err['msg']}" if loc else err["msg"])
    logger.info("Malformed request to %s: %s", request.url.path, messages)
    return JSONResponse(status_code=400, content={"error": ". ".join(messages)})

# ---------------- Donor Endpoints -----------------

@app.post("/api/donors", response_model=Donor, status_code=201, response_model_exclude_none=True)
def register_donor(payload: DonorCreate):
    donor = create_donor(payload.model_dump(by_alias=True, exclude_none=True))
    return serialize_donor(donor)


@app.get("/api/donors", response_model=List[Donor], response_model_exclude_none=True)
def get_donors(blood_group: Optional[str] = Query(None, alias="bloodGroup")):
    return [serialize_donor(d) for d in list_donors(blood_group)]


@app.post("/api/donors/validate", response_model=ValidationReport)
def validate_donor(payload: DonorCreate):
    _, errors = check_donor(payload.model_dump(by_alias=True, exclude_none=True))
    return {"valid": not errors, "errors": errors}


@app.delete("/api/donors/clear", response_model=ClearResult)
def clear_all_donors():
    deleted = clear_donors()
    return {"message": "All donor data cleared successfully", "deleted": deleted}


@app.get("/api/blood-groups", response_model=List[str])
def get_blood_groups():
    return list(BLOOD_GROUPS)

# ---------------- Health -----------------

@app.get("/")
def read_root():
    return {"message": "Blood Donor Registry API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if database.db is not None:
            response["database_name"] = database.db.name
            response["collections"] = database.db.list_collection_names()[:10]
            response["database"] = "Connected & Working"
            response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"Error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
