#!/usr/bin/env python3
"""
Database Setup & Seed Script for SkillGap
Creates the tables, then seeds demo companies and job postings.

    python setup_database.py            # create tables + seed
    python setup_database.py --reset    # drop everything first
"""

import sys

from database import (
    Base, SessionLocal, engine, Company, Job,
    check_db_connection, create_company, create_job, get_company_by_auth_id, init_db,
)

COMPANIES = [
    {
        "auth_id": "seed_company_techcorp",
        "company_name": "TechCorp Solutions",
        "email": "hr@techcorp.com",
        "website": "https://techcorp.com",
        "description": "Leading software development company specializing in cloud-native solutions",
        "industry": "Technology",
        "size": "Large",
        "verified": True,
    },
    {
        "auth_id": "seed_company_aiventures",
        "company_name": "AI Ventures",
        "email": "careers@aiventures.com",
        "website": "https://aiventures.io",
        "description": "Cutting-edge AI and Machine Learning research company",
        "industry": "Artificial Intelligence",
        "size": "Medium",
        "verified": True,
    },
    {
        "auth_id": "seed_company_cloudops",
        "company_name": "CloudOps Inc",
        "email": "jobs@cloudops.com",
        "website": "https://cloudops.io",
        "description": "DevOps and Cloud Infrastructure experts",
        "industry": "Cloud Services",
        "size": "Medium",
        "verified": True,
    },
]

# company auth_id -> postings
JOBS = {
    "seed_company_techcorp": [
        {
            "title": "Senior DevOps Engineer",
            "description": (
                "We are seeking an experienced DevOps Engineer to design and run CI/CD "
                "pipelines, manage Kubernetes clusters and keep our infrastructure highly available."
            ),
            "requirements": ["Kubernetes", "Docker", "Terraform", "CI/CD", "AWS/GCP/Azure", "5+ years experience"],
            "location": "Remote",
            "experience_level": "Senior",
            "salary_min": 130000, "salary_max": 180000,
        },
        {
            "title": "Junior DevOps Engineer",
            "description": "Join our platform team and learn to automate builds, deployments and monitoring.",
            "requirements": ["Basic Docker knowledge", "Linux fundamentals", "Git", "Python or Bash scripting"],
            "location": "Austin, TX",
            "experience_level": "Entry",
            "salary_min": 70000, "salary_max": 90000,
        },
    ],
    "seed_company_aiventures": [
        {
            "title": "Senior Machine Learning Engineer",
            "description": "Build and ship production ML systems, from training pipelines to model serving.",
            "requirements": ["Python", "TensorFlow/PyTorch", "MLOps", "Kubernetes", "5+ years ML experience"],
            "location": "New York, NY",
            "experience_level": "Senior",
            "salary_min": 160000, "salary_max": 220000,
        },
        {
            "title": "Data Scientist",
            "description": "Turn product data into insight: experiments, forecasting and customer analytics.",
            "requirements": ["Python", "SQL", "Pandas", "Scikit-learn", "Statistics", "3+ years experience"],
            "location": "Remote",
            "experience_level": "Mid",
            "salary_min": 110000, "salary_max": 150000,
        },
    ],
    "seed_company_cloudops": [
        {
            "title": "Site Reliability Engineer",
            "description": "Own reliability for a multi-region platform: SLOs, observability and incident response.",
            "requirements": ["Kubernetes", "Prometheus", "Grafana", "Python/Go", "Linux", "4+ years experience"],
            "location": "Remote",
            "experience_level": "Senior",
            "salary_min": 140000, "salary_max": 175000,
        },
    ],
}


def test_connection():
    print("Testing database connection...")
    if check_db_connection():
        print("Database connected successfully!\n")
        return True
    print("Database connection failed!")
    print("Check your DATABASE_URL environment variable\n")
    return False


def reset_database():
    print("Dropping all tables...")
    Base.metadata.drop_all(bind=engine)


def seed(db):
    """Insert seed companies and their jobs; companies already present are skipped."""
    created_jobs = 0
    for entry in COMPANIES:
        if get_company_by_auth_id(db, entry["auth_id"]):
            print(f"   Company already exists: {entry['company_name']}")
            continue

        fields = dict(entry)
        company = create_company(
            db, auth_id=fields.pop("auth_id"), email=fields.pop("email"),
            company_name=fields.pop("company_name"), **fields,
        )
        print(f"   Created company: {company.company_name}")

        for job in JOBS.get(company.auth_id, []):
            create_job(db, company, type="Full-time", status="Active", **job)
            created_jobs += 1

    print(f"   Created {created_jobs} jobs\n")
    return created_jobs


def main():
    print("=" * 60)
    print("SkillGap Database Setup")
    print("=" * 60)

    if not test_connection():
        sys.exit(1)

    if "--reset" in sys.argv:
        reset_database()

    init_db()

    db = SessionLocal()
    try:
        seed(db)
        print(f"Companies: {db.query(Company).count()}  Jobs: {db.query(Job).count()}")
    finally:
        db.close()

    print("=" * 60)
    print("Setup complete!")


if __name__ == "__main__":
    main()
