import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import settings
from database import (
    ADMISSIONS, COLLEGES, GRADUATES, RESEARCH, USERS,
    close_client, ensure_indexes, get_db,
)
from errors import ApiError, BadRequest, Conflict, NotFound, PartialFailure
from ratings import top_rated, with_average
from schemas import Admission, Review, TokenRequest, User as UserSchema, UserUpdate
from security import ensure_owner, get_current_claims, issue_token

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_factory = app.dependency_overrides.get(get_db, get_db)
    ensure_indexes(db_factory())
    logger.info("%s started", settings.app_name)
    yield
    close_client()


# App and CORS
app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())[1:])
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg", ""))
    return JSONResponse(status_code=400, content=BadRequest("; ".join(problems)).to_dict())


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": True, "message": "database error"})

# Helpers

def now() -> datetime:
    return datetime.now(timezone.utc)


def to_obj_id(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise BadRequest("Invalid id")


def sanitize(doc: Optional[Dict]) -> Optional[Dict]:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def parse_positive_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except ValueError:
        raise BadRequest(f"{name} must be a positive integer")
    if number < 1:
        raise BadRequest(f"{name} must be a positive integer")
    return number


# skip() values travel as BSON int64; stay well inside that
MAX_OFFSET = 2 ** 31 - 1


# Request/Response Models
class Pagination(BaseModel):
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_pagination(page: Optional[str], limit: Optional[str]) -> Pagination:
    """Turn raw ``page``/``limit`` query strings into a bounded request."""
    p = parse_positive_int("page", page, 1)
    size = parse_positive_int("limit", limit, settings.default_page_limit)
    if size > settings.max_page_limit:
        raise BadRequest(f"limit must not exceed {settings.max_page_limit}")
    paging = Pagination(page=p, limit=size)
    if paging.offset > MAX_OFFSET:
        raise BadRequest("page is out of range")
    return paging


class TokenResponse(BaseModel):
    token: str


# Auth Routes
@app.post("/jwt", response_model=TokenResponse)
def create_token(payload: TokenRequest):
    return TokenResponse(token=issue_token({"email": payload.email}))


@app.post("/adduser")
def add_user(payload: UserSchema, db: Database = Depends(get_db)):
    user_doc = payload.model_dump()
    user_doc["created_at"] = now()
    try:
        res = db[USERS].insert_one(user_doc)
    except DuplicateKeyError:
        # unique index on email closes the check-then-insert race
        return {"error": True, "message": "User already exists"}
    logger.info("Registered user %s", payload.email)
    return {"acknowledged": True, "inserted_id": str(res.inserted_id)}


# User profile
@app.get("/user/{email}")
def get_user(email: EmailStr, claims: Dict[str, Any] = Depends(get_current_claims),
             db: Database = Depends(get_db)):
    ensure_owner(claims, email)
    return sanitize(db[USERS].find_one({"email": email}))


@app.patch("/user/{email}")
def update_user(email: EmailStr, payload: UserUpdate,
                claims: Dict[str, Any] = Depends(get_current_claims),
                db: Database = Depends(get_db)):
    ensure_owner(claims, email)
    changes = payload.changes()
    if not changes:
        raise BadRequest("No profile fields to update")
    res = db[USERS].update_one({"email": email}, {"$set": {**changes, "updated_at": now()}})
    if res.matched_count == 0:
        raise NotFound("User not found")
    return sanitize(db[USERS].find_one({"email": email}))


# Colleges
@app.get("/colleges")
def list_colleges(page: Optional[str] = None, limit: Optional[str] = None,
                  db: Database = Depends(get_db)):
    paging = parse_pagination(page, limit)
    cursor = db[COLLEGES].find({}).sort("_id", 1).skip(paging.offset).limit(paging.limit)
    return [with_average(sanitize(c)) for c in cursor]


@app.get("/colleges/total")
def count_colleges(db: Database = Depends(get_db)):
    return db[COLLEGES].count_documents({})


@app.get("/colleges/search/{name:path}")
def search_colleges(name: str, db: Database = Depends(get_db)):
    q = {"name": {"$regex": re.escape(name), "$options": "i"}}
    return [with_average(sanitize(c)) for c in db[COLLEGES].find(q).sort("_id", 1)]


@app.get("/college/{college_id}")
def get_college(college_id: str, db: Database = Depends(get_db)):
    college = db[COLLEGES].find_one({"_id": to_obj_id(college_id)})
    if not college:
        return None
    return with_average(sanitize(college))


@app.get("/popularcolleges")
def popular_colleges(db: Database = Depends(get_db)):
    colleges = [sanitize(c) for c in db[COLLEGES].find({}).sort("_id", 1)]
    return top_rated(colleges, 3)


# Admissions
@app.post("/admission")
def submit_admission(payload: Admission,
                     claims: Dict[str, Any] = Depends(get_current_claims),
                     db: Database = Depends(get_db)):
    ensure_owner(claims, payload.student_email)
    doc = payload.model_dump()
    doc.update({"reviewed": False, "created_at": now()})
    try:
        res = db[ADMISSIONS].insert_one(doc)
    except DuplicateKeyError:
        raise Conflict("Admission already exists for this college")
    logger.info("Admission by %s to college %s", payload.student_email, payload.college_id)
    return {"acknowledged": True, "inserted_id": str(res.inserted_id)}


@app.get("/admission/{email}")
def get_admissions(email: EmailStr, claims: Dict[str, Any] = Depends(get_current_claims),
                   db: Database = Depends(get_db)):
    ensure_owner(claims, email)
    return [sanitize(a) for a in db[ADMISSIONS].find({"student_email": email})]


# Catalogs
@app.get("/graduates")
def list_graduates(db: Database = Depends(get_db)):
    return [sanitize(g) for g in db[GRADUATES].find({})]


@app.get("/research")
def list_research(db: Database = Depends(get_db)):
    return [sanitize(r) for r in db[RESEARCH].find({})]


# Reviews
@app.get("/reviews")
def list_reviews(db: Database = Depends(get_db)):
    reviews: List[Dict[str, Any]] = []
    for college in db[COLLEGES].find({}, {"name": 1, "reviews": 1}).sort("_id", 1):
        for r in college.get("reviews", []):
            reviews.append({**r, "college_name": college.get("name"), "college_id": str(college["_id"])})
    return reviews


@app.patch("/review/{college_id}")
def add_review(college_id: str, payload: Review, db: Database = Depends(get_db)):
    """Append a review, then mark the reviewer's admission to that college as reviewed.

    The two writes are not atomic. If the college update lands but the admission
    update fails, the caller gets a partial-failure response naming both steps.
    """
    _id = to_obj_id(college_id)
    res = db[COLLEGES].update_one({"_id": _id}, {"$push": {"reviews": payload.model_dump()}})
    if res.matched_count == 0:
        raise NotFound("College not found")
    try:
        adm = db[ADMISSIONS].update_one(
            {"student_email": payload.reviewer_email, "college_id": college_id},
            {"$set": {"reviewed": True, "updated_at": now()}},
        )
    except PyMongoError as e:
        logger.error("Review added to %s but admission update failed: %s", college_id, e)
        raise PartialFailure(
            "Review saved but admission was not updated",
            completed=["review"], failed=["admission"],
        )
    return {"acknowledged": True, "review_added": True, "admission_updated": adm.matched_count}


# Utility endpoints
@app.get("/")
def root():
    return {"message": f"{settings.app_name} running"}


def run():
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
