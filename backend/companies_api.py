# companies_api.py
"""
Company account endpoints
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import get_current_company, get_subject
from database import (
    create_company, get_company_by_auth_id, get_company_by_name, get_db, update_fields,
)
from exceptions import ConflictError, ValidationError
from models import CompanyRegisterRequest, CompanyUpdateRequest, company_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.post("/register", status_code=201)
async def register_company(request: CompanyRegisterRequest, subject: str = Depends(get_subject),
                           db: Session = Depends(get_db)):
    if get_company_by_auth_id(db, subject):
        raise ConflictError("Company already registered", resource="company")

    name = request.company_name.strip()
    if not name:
        raise ValidationError("Company name is required", field="companyName")
    if get_company_by_name(db, name):
        raise ConflictError(f"Company name '{name}' is already taken", resource="company")

    fields = request.model_dump(exclude={"company_name", "email"}, exclude_none=True)
    try:
        company = create_company(db, auth_id=subject, email=request.email.lower().strip(),
                                 company_name=name, **fields)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Company email already registered", resource="company")
    logger.info("Company registered: %s (%s)", company.company_name, subject)

    return {"message": "Company registered successfully", "company": company_to_dict(company)}


@router.get("/profile")
async def get_company_profile(company=Depends(get_current_company)):
    return {"company": company_to_dict(company)}


@router.put("/profile")
async def update_company_profile(request: CompanyUpdateRequest, company=Depends(get_current_company),
                                 db: Session = Depends(get_db)):
    changes = request.model_dump(exclude_unset=True)

    new_name = changes.get("company_name")
    if new_name and new_name != company.company_name:
        existing = get_company_by_name(db, new_name)
        if existing and existing.id != company.id:
            raise ConflictError(f"Company name '{new_name}' is already taken", resource="company")

    try:
        company = update_fields(db, company, changes)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Company email already registered", resource="company")
    return {"message": "Company profile updated successfully", "company": company_to_dict(company)}
