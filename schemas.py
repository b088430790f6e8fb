"""
Database Schemas for the Campus Books API

Each model describes the documents of one MongoDB collection:
- users: registered accounts, unique by email
- colleges: college profiles with an embedded list of reviews
- admissions: a student's application to one college
- graduates, research: read-only catalog entries
"""

from typing import List, Optional

from pydantic import BaseModel, Field, EmailStr


class User(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    address: Optional[str] = Field(None, max_length=400)
    photo_url: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = Field(None, max_length=40)
    address: Optional[str] = Field(None, max_length=400)

    def changes(self) -> dict:
        """Fields the client actually supplied, so the rest stay untouched."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class Review(BaseModel):
    reviewer_name: str = Field(..., min_length=1, max_length=120)
    reviewer_email: EmailStr
    rating: float = Field(..., ge=0, le=5)
    review: str = Field("", max_length=2000)


class College(BaseModel):
    name: str
    image: Optional[str] = None
    admission_dates: Optional[str] = None
    events: List[str] = Field(default_factory=list)
    research_history: Optional[str] = None
    sports: List[str] = Field(default_factory=list)
    reviews: List[Review] = Field(default_factory=list)


class Admission(BaseModel):
    candidate_name: str = Field(..., min_length=1, max_length=120)
    student_email: EmailStr
    college_id: str
    college_name: Optional[str] = None
    subject: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[str] = None
    reviewed: bool = False


class Graduate(BaseModel):
    name: str
    college_name: str
    graduation_year: Optional[int] = None
    subject: Optional[str] = None
    image: Optional[str] = None


class Research(BaseModel):
    title: str
    college_name: str
    authors: List[str] = Field(default_factory=list)
    link: Optional[str] = None
    published: Optional[str] = None


class TokenRequest(BaseModel):
    email: EmailStr
