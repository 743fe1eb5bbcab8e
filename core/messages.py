"""
Outreach text for a job: LinkedIn messages, an email, and copy-paste form answers.
"""
from __future__ import annotations

from typing import Dict, List

from core.criteria import USER_PROFILE, all_profile_skills

# Keyword -> domain phrase, checked in order.
_DOMAIN_HINTS = [
    (("fintech", "banking", "payment"), "fintech and financial technology"),
    (("health", "medical"), "healthcare technology"),
    (("ecommerce", "e-commerce", "retail"), "e-commerce"),
    (("edtech", "education"), "education technology"),
    (("saas", "b2b"), "SaaS and B2B solutions"),
    ((" ai ", "machine learning", "artificial intelligence"), "AI and machine learning"),
    (("security", "cyber"), "cybersecurity"),
]


def get_relevant_skills(job: Dict) -> List[str]:
    """Profile skills mentioned by the job (max 5), else the top expert skills."""
    job_skills = [s.lower() for s in job.get("skills") or []]
    description = (job.get("description") or "").lower()
    relevant = [
        skill
        for skill in all_profile_skills()
        if any(skill.lower() in js for js in job_skills) or skill.lower() in description
    ]
    if relevant:
        return relevant[:5]
    return USER_PROFILE["skills"]["expert"][:5]


def infer_company_domain(job: Dict) -> str:
    description = f" {(job.get('description') or '').lower()} "
    for words, domain in _DOMAIN_HINTS:
        if any(w in description for w in words):
            return domain
    return "technology innovation"


def linkedin_connection_message(job: Dict) -> str:
    expert = ", ".join(USER_PROFILE["skills"]["expert"][:3])
    message = (
        f"Hi! I noticed the {job.get('title')} opening at {job.get('company_name')}. "
        f"With {USER_PROFILE['years_of_experience']}+ years in {expert}, I'd love to connect "
        f"and learn more about this opportunity. Thank you!"
    )
    return message[:300]


def linkedin_connection_note(job: Dict) -> str:
    note = (
        f"Hi! Interested in {job.get('title')} at {job.get('company_name')}. "
        f"{USER_PROFILE['years_of_experience']}+ yrs exp in {USER_PROFILE['skills']['expert'][0]}. "
        f"Would love to connect!"
    )
    return note[:200]


def _signature() -> str:
    lines = [USER_PROFILE["name"], USER_PROFILE["phone"], USER_PROFILE["email"]]
    return "\n".join(line for line in lines if line)


def linkedin_inmail(job: Dict) -> str:
    highlights = "\n".join(f"• {a}" for a in USER_PROFILE["achievements"][:2])
    return (
        f"Hi,\n\n"
        f"I came across the {job.get('title')} position at {job.get('company_name')} and I'm very "
        f"interested in this opportunity.\n\n"
        f"With {USER_PROFILE['years_of_experience']}+ years of experience as a {USER_PROFILE['title']}, "
        f"I have strong expertise in {', '.join(get_relevant_skills(job))}.\n\n"
        f"Key highlights:\n{highlights}\n\n"
        f"I would love to discuss how my background aligns with {job.get('company_name')}'s needs.\n\n"
        f"Best regards,\n{_signature()}"
    )


def email_subject(job: Dict) -> str:
    return (
        f"Application for {job.get('title')} - {USER_PROFILE['name']} | "
        f"{USER_PROFILE['years_of_experience']}+ Years {USER_PROFILE['skills']['expert'][0]} Experience"
    )


def email_body(job: Dict) -> str:
    achievements = "\n".join(f"• {a}" for a in USER_PROFILE["achievements"][:3])
    linkedin = f"\nLinkedIn: {USER_PROFILE['linkedin_url']}" if USER_PROFILE["linkedin_url"] else ""
    return (
        f"Dear Hiring Team,\n\n"
        f"I am writing to express my strong interest in the {job.get('title')} position at "
        f"{job.get('company_name')}.\n\n"
        f"As a {USER_PROFILE['title']} with {USER_PROFILE['years_of_experience']}+ years of experience, "
        f"I bring expertise in {', '.join(get_relevant_skills(job))}. My background includes:\n\n"
        f"{achievements}\n\n"
        f"I am particularly drawn to {job.get('company_name')} because of its work in "
        f"{infer_company_domain(job)}.\n\n"
        f"I have attached my resume and would welcome the opportunity to discuss how I can "
        f"contribute to your team.\n\n"
        f"Thank you for considering my application.\n\n"
        f"Best regards,\n{_signature()}{linkedin}"
    )


def short_cover_letter(job: Dict) -> str:
    achievements = "\n".join(f"• {a}" for a in USER_PROFILE["achievements"][:2])
    return (
        f"I am excited to apply for the {job.get('title')} position at {job.get('company_name')}. "
        f"With {USER_PROFILE['years_of_experience']}+ years of experience in "
        f"{', '.join(get_relevant_skills(job)[:3])}, I am confident I can contribute effectively.\n\n"
        f"My key achievements include:\n{achievements}\n\n"
        f"I am available with a {USER_PROFILE['preferences']['notice_period']} notice period."
    )


def why_join(job: Dict) -> str:
    company = job.get("company_name")
    expert = " and ".join(USER_PROFILE["skills"]["expert"][:2])
    domains = " and ".join(USER_PROFILE["domains"][:2])
    return (
        f"I am drawn to {company} for several reasons:\n\n"
        f"1. The chance to work on {infer_company_domain(job)} challenges aligns with my career goals.\n\n"
        f"2. The {job.get('title')} role matches my {USER_PROFILE['years_of_experience']}+ years "
        f"of experience in {expert}.\n\n"
        f"3. My background in {domains} can bring a useful perspective to the team.\n\n"
        f"4. {company}'s growth presents excellent opportunities for professional development."
    )


def form_data(job: Dict) -> Dict:
    salary = USER_PROFILE["salary"]
    return {
        "full_name": USER_PROFILE["name"],
        "email": USER_PROFILE["email"],
        "phone": USER_PROFILE["phone"],
        "linkedin_url": USER_PROFILE["linkedin_url"],
        "portfolio_url": USER_PROFILE["portfolio_url"],
        "current_location": USER_PROFILE["location"],
        "years_of_experience": USER_PROFILE["years_of_experience"],
        "current_ctc": f"{salary['current_ctc']} LPA",
        "expected_ctc": f"{salary['expected_ctc']} LPA",
        "notice_period": USER_PROFILE["preferences"]["notice_period"],
        "skills": ", ".join(get_relevant_skills(job)),
        "cover_letter": short_cover_letter(job),
        "why_join": why_join(job),
    }


def generate_messages(job: Dict) -> Dict:
    """All outreach text for a job in one dict."""
    return {
        "linkedin_message": linkedin_connection_message(job),
        "linkedin_connection_note": linkedin_connection_note(job),
        "linkedin_inmail": linkedin_inmail(job),
        "email_subject": email_subject(job),
        "email_body": email_body(job),
        "form_data": form_data(job),
    }


__all__ = [
    "get_relevant_skills",
    "infer_company_domain",
    "linkedin_connection_message",
    "linkedin_connection_note",
    "linkedin_inmail",
    "email_subject",
    "email_body",
    "form_data",
    "generate_messages",
]
