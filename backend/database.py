# database.py
"""
Database connection and ORM models for SkillGap
Uses SQLAlchemy with PostgreSQL (SQLite for local runs and tests)
"""

import logging
from datetime import datetime

from sqlalchemy import (
    create_engine, func, text, Column, Integer, String, Text, Boolean, JSON,
    TIMESTAMP, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from sqlalchemy.pool import QueuePool, StaticPool

from config import DATABASE_URL

logger = logging.getLogger(__name__)


def make_engine(url: str):
    """Pooled engine for PostgreSQL; a single shared connection for SQLite."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,
    )


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# ═══════════════════════════════════════════════════════════════════════════════
# ORM Models
# ═══════════════════════════════════════════════════════════════════════════════

APPLICATION_STATUSES = ("Applied", "Reviewed", "Shortlisted", "Rejected", "Hired")


class User(Base):
    """Candidate account and profile"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), default="")
    username = Column(String(255), default="")
    role = Column(String(20), default="user")
    profile_completed = Column(Boolean, default=False)

    resume_url = Column(String(1024))
    github_id = Column(String(255))
    github_profile = Column(String(1024))
    linkedin_profile = Column(String(1024))
    portfolio = Column(String(1024))
    skills = Column(JSON, default=list)
    experience_level = Column(String(20), default="Beginner")

    # Replaced wholesale on every successful resume analysis
    resume_analysis = Column(JSON, nullable=True)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    target_jobs = relationship("TargetJob", back_populates="user", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="user", cascade="all, delete-orphan")


class Company(Base):
    """Company account"""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(String(255), unique=True, nullable=False, index=True)
    company_name = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    website = Column(String(1024))
    description = Column(Text)
    logo = Column(String(1024))
    industry = Column(String(255))
    size = Column(String(20))
    verified = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    jobs = relationship("Job", back_populates="company", cascade="all, delete-orphan")


class Job(Base):
    """Job posting"""
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    company_name = Column(String(255))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, default=list)
    location = Column(String(255))
    type = Column(String(20), default="Full-time")
    experience_level = Column(String(20))
    salary = Column(String(255))
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String(8), default="USD")
    status = Column(String(20), default="Active")
    views = Column(Integer, default=0)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="jobs")
    applicants = relationship(
        "Application", back_populates="job",
        cascade="all, delete-orphan", order_by="Application.applied_at",
    )


class Application(Base):
    """A candidate on a job's applicant list"""
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    applied_at = Column(TIMESTAMP, default=datetime.utcnow)
    status = Column(String(20), default="Applied")

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
    )

    job = relationship("Job", back_populates="applicants")
    user = relationship("User", back_populates="applications")


class TargetJob(Base):
    """
    A job the candidate is tracking, with its own skill-gap analysis state.
    One row per (user, job_key).
    """
    __tablename__ = "target_jobs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    job_key = Column(String(64), nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    company = Column(String(255))

    analysis_status = Column(String(20), nullable=False, default="Pending")
    skill_gaps = Column(JSON, default=list)  # legacy free-text gaps

    match_percentage = Column(Integer)
    match_summary = Column(Text)
    strengths = Column(JSON)
    critical_gaps = Column(JSON)
    proficiency_gaps = Column(JSON)
    recommended_actions = Column(JSON)
    timeline_assessment = Column(JSON)
    analyzed_at = Column(TIMESTAMP)

    revision = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "job_key", name="uq_target_job_user_key"),
    )

    user = relationship("User", back_populates="target_jobs")


# ═══════════════════════════════════════════════════════════════════════════════
# Session / bootstrap helpers
# ═══════════════════════════════════════════════════════════════════════════════

def get_db():
    """
    Dependency for FastAPI routes to get a database session.

        @router.get("/jobs")
        def list_jobs(db: Session = Depends(get_db)): ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")


def check_db_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


def update_fields(db, obj, fields: dict):
    """Field-level update: each given field is overwritten, others untouched."""
    for name, value in fields.items():
        setattr(obj, name, value)
    db.commit()
    db.refresh(obj)
    return obj


# ═══════════════════════════════════════════════════════════════════════════════
# User Service Functions
# ═══════════════════════════════════════════════════════════════════════════════

def get_user_by_auth_id(db, auth_id: str):
    return db.query(User).filter(User.auth_id == auth_id).first()


def get_user_by_email(db, email: str):
    return db.query(User).filter(User.email == email).first()


def create_user(db, auth_id: str, email: str, full_name: str = "", username: str = ""):
    user = User(
        auth_id=auth_id,
        email=email,
        full_name=full_name,
        username=username,
        skills=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db, auth_id: str) -> bool:
    user = get_user_by_auth_id(db, auth_id)
    if not user:
        return False
    db.delete(user)
    db.commit()
    return True


# ═══════════════════════════════════════════════════════════════════════════════
# Company / Job Service Functions
# ═══════════════════════════════════════════════════════════════════════════════

def get_company_by_auth_id(db, auth_id: str):
    return db.query(Company).filter(Company.auth_id == auth_id).first()


def get_company_by_name(db, company_name: str):
    return db.query(Company).filter(Company.company_name == company_name).first()


def create_company(db, auth_id: str, email: str, company_name: str, **fields):
    company = Company(auth_id=auth_id, email=email, company_name=company_name, **fields)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def get_job(db, job_id: int):
    return db.query(Job).filter(Job.id == job_id).first()


def get_company_job(db, job_id: int, company_id: int):
    """A job only if it belongs to the given company."""
    return db.query(Job).filter(Job.id == job_id, Job.company_id == company_id).first()


def create_job(db, company, **fields):
    job = Job(company_id=company.id, company_name=company.company_name, **fields)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def list_jobs(db, status=None, type=None, experience_level=None, company_id=None):
    query = db.query(Job)
    if status:
        query = query.filter(Job.status == status)
    if type:
        query = query.filter(Job.type == type)
    if experience_level:
        query = query.filter(Job.experience_level == experience_level)
    if company_id:
        query = query.filter(Job.company_id == company_id)
    return query.order_by(Job.created_at.desc(), Job.id.desc()).all()


def has_applied(db, job_id: int, user_id: int) -> bool:
    return db.query(Application).filter(
        Application.job_id == job_id,
        Application.user_id == user_id,
    ).first() is not None


def get_application(db, job_id: int, application_id: int):
    return db.query(Application).filter(
        Application.id == application_id,
        Application.job_id == job_id,
    ).first()


def record_job_view(db, job):
    db.query(Job).filter(Job.id == job.id).update(
        {Job.views: func.coalesce(Job.views, 0) + 1}, synchronize_session=False,
    )
    db.commit()
    db.refresh(job)
    return job


def add_applicant(db, job, user):
    application = Application(job_id=job.id, user_id=user.id, status="Applied")
    db.add(application)
    db.commit()
    db.refresh(application)
    return application
