"""
Search criteria and the candidate profile used for matching, messages and forms.
"""
from __future__ import annotations

import os

SEARCH_CRITERIA = {
    "keywords": [
        "Full Stack Developer",
        "Backend Developer",
        "Node.js Developer",
        "React Developer",
        "Software Engineer",
        "TypeScript Developer",
        "JavaScript Developer",
        "Senior Software Engineer",
        "Senior Full Stack Developer",
        "Senior Backend Developer",
    ],
    "locations": [
        "Remote",
        "Work from Home",
        "WFH",
        "Ahmedabad",
        "Gujarat",
        "Gandhinagar",
        "India Remote",
        "Anywhere",
    ],
    "experience": {"min": 3, "max": 6},
    "must_have_skills": ["Node.js", "JavaScript", "TypeScript"],
    "preferred_skills": [
        "React",
        "React.js",
        "PostgreSQL",
        "GraphQL",
        "Apollo",
        "AWS",
        "GCP",
        "Redis",
        "Docker",
        "Kubernetes",
        "CI/CD",
        "REST API",
        "MongoDB",
        "Python",
    ],
    # INR per year
    "salary_min": 2000000,
    "exclude_companies": [c for c in os.getenv("EXCLUDE_COMPANIES", "").split(",") if c.strip()],
    "exclude_keywords": [
        "Internship",
        "Intern",
        "Fresher",
        "Entry Level",
        "0-1 years",
        "0-2 years",
        "PHP Developer",
        ".NET Developer",
        "Java Developer",
    ],
}

USER_PROFILE = {
    "name": os.getenv("CANDIDATE_NAME", "Job Seeker"),
    "title": os.getenv("CANDIDATE_TITLE", "Full Stack Developer"),
    "years_of_experience": int(os.getenv("CANDIDATE_YEARS", "4")),
    "location": os.getenv("CANDIDATE_LOCATION", "Gandhinagar, Gujarat, India"),
    "email": os.getenv("CANDIDATE_EMAIL", ""),
    "phone": os.getenv("CANDIDATE_PHONE", ""),
    "linkedin_url": os.getenv("CANDIDATE_LINKEDIN", ""),
    "portfolio_url": os.getenv("CANDIDATE_PORTFOLIO", ""),
    "skills": {
        "expert": ["JavaScript", "TypeScript", "Node.js", "React.js", "PostgreSQL", "Apollo GraphQL"],
        "proficient": ["Redis", "AWS", "GCP", "Docker", "REST APIs", "CI/CD", "GitHub Actions"],
        "familiar": ["Python", "React Native", "Redux", "SQL"],
    },
    "domains": ["Cybersecurity", "Insurtech", "Geospatial", "Mobile Apps"],
    "achievements": [
        "Optimized a cloud infrastructure scanning engine with 85%+ performance improvement",
        "Led development of a high-throughput data pipeline processing 150 million records",
        "Architected an end-to-end evidence management platform with RBAC",
        "Built a security graph feature giving a single view of infrastructure",
    ],
    "preferences": {
        "remote_preferred": True,
        "willing_to_relocate": False,
        "notice_period": os.getenv("CANDIDATE_NOTICE_PERIOD", "30 days"),
    },
    # Lakhs per annum
    "salary": {
        "current_ctc": int(os.getenv("CANDIDATE_CURRENT_CTC", "18")),
        "expected_ctc": int(os.getenv("CANDIDATE_EXPECTED_CTC", "25")),
    },
}


def all_profile_skills() -> list[str]:
    skills = USER_PROFILE["skills"]
    return skills["expert"] + skills["proficient"] + skills["familiar"]


def is_excluded_company(company_name: str | None) -> bool:
    name = (company_name or "").strip().lower()
    if not name:
        return False
    return any(ex.strip().lower() in name for ex in SEARCH_CRITERIA["exclude_companies"])
