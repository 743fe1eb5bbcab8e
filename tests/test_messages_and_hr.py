import pytest

from core import hr_finder, messages
from core.criteria import USER_PROFILE


JOB = {
    "title": "Backend Engineer",
    "company_name": "PayFast",
    "description": "Build payment APIs with Node.js, TypeScript and Redis on AWS.",
    "skills": ["Docker"],
}


def test_relevant_skills_come_from_job_text_and_tags():
    skills = messages.get_relevant_skills(JOB)
    assert skills == ["TypeScript", "Node.js", "Redis", "AWS", "Docker"]


def test_relevant_skills_fall_back_to_expert_skills():
    assert messages.get_relevant_skills({"description": "Sales role"}) == USER_PROFILE["skills"]["expert"][:5]


@pytest.mark.parametrize(
    "description,domain",
    [
        ("We build payment rails", "fintech and financial technology"),
        ("An AI startup", "AI and machine learning"),
        ("Cyber defence tooling", "cybersecurity"),
        ("Widgets", "technology innovation"),
    ],
)
def test_infer_company_domain(description, domain):
    assert messages.infer_company_domain({"description": description}) == domain


def test_linkedin_texts_respect_length_limits():
    long_job = dict(JOB, title="Principal " * 40, company_name="Enormous Company Name " * 5)
    assert len(messages.linkedin_connection_message(long_job)) <= 300
    assert len(messages.linkedin_connection_note(long_job)) <= 200


def test_generate_messages_contains_every_template():
    out = messages.generate_messages(JOB)
    assert set(out) == {
        "linkedin_message",
        "linkedin_connection_note",
        "linkedin_inmail",
        "email_subject",
        "email_body",
        "form_data",
    }
    assert "Backend Engineer" in out["email_subject"]
    assert "fintech" in out["email_body"]
    form = out["form_data"]
    assert form["expected_ctc"].endswith("LPA")
    assert form["skills"].startswith("TypeScript")
    assert "PayFast" in form["why_join"]


def test_hr_links_for_company():
    assert hr_finder.clean_company_slug("Crest Data Systems Pvt. Ltd.") == "crestdatasystems"
    assert hr_finder.guess_career_page("Acme Technologies") == "https://acme.com/careers"
    assert hr_finder.guess_career_page("") is None

    info = hr_finder.find_hr("Acme Labs")
    assert info["career_page_url"] == "https://acmelabs.com/careers"
    assert "keywords=HR%20recruiter%20Acme%20Labs" in info["linkedin_url"]

    links = hr_finder.get_all_search_links("Acme Labs")
    assert set(links) == {"linkedin_hr", "linkedin_company", "google_careers", "glassdoor", "ambitionbox"}
    assert links["ambitionbox"] == "https://www.ambitionbox.com/overview/acme-labs-overview"
    assert links["google_careers"].endswith("Acme+Labs+careers+jobs")
