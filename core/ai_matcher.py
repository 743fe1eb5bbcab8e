"""
LLM-backed job matching and cover letter generation.

All providers are reached through the OpenAI SDK using their OpenAI-compatible
endpoints. When no key is configured, or a call fails, keyword matching and a
template cover letter are used instead.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Dict, List, Optional

from openai import OpenAI

from core import config
from core.criteria import SEARCH_CRITERIA, USER_PROFILE

log = logging.getLogger("ai_matcher")

PROVIDERS = {
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "model": "llama-3.3-70b-versatile",
    },
    "openai": {
        "base_url": None,
        "model": "gpt-4-turbo-preview",
    },
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "model": "gemini-1.5-flash",
    },
}

MIN_SECONDS_BETWEEN_CALLS = 3.0
MAX_DESCRIPTION_CHARS = 2000

_client: Optional[OpenAI] = None
_client_key: Optional[str] = None
_last_call_at = 0.0


def _get_client() -> Optional[OpenAI]:
    """Return a cached client for the configured provider, or None without a key."""
    global _client, _client_key
    api_key = config.ai_api_key()
    provider = PROVIDERS.get(config.AI_PROVIDER)
    if not api_key or not provider:
        return None
    cache_key = f"{config.AI_PROVIDER}:{api_key}"
    if _client is None or _client_key != cache_key:
        kwargs = {"api_key": api_key}
        if provider["base_url"]:
            kwargs["base_url"] = provider["base_url"]
        _client = OpenAI(**kwargs)
        _client_key = cache_key
    return _client


def ai_enabled() -> bool:
    return _get_client() is not None


def _wait_for_rate_limit() -> None:
    global _last_call_at
    elapsed = time.monotonic() - _last_call_at
    if elapsed < MIN_SECONDS_BETWEEN_CALLS:
        time.sleep(MIN_SECONDS_BETWEEN_CALLS - elapsed)
    _last_call_at = time.monotonic()


def complete_text(
    prompt: str,
    system: Optional[str] = None,
    temperature: float = 0.3,
    max_tokens: int = 1000,
    json_mode: bool = False,
) -> str:
    """
    Send one chat completion and return the message text.
    Raises RuntimeError when no provider key is configured.
    """
    client = _get_client()
    if client is None:
        raise RuntimeError(f"No API key configured for AI provider {config.AI_PROVIDER!r}")

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    kwargs = {
        "model": PROVIDERS[config.AI_PROVIDER]["model"],
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    _wait_for_rate_limit()
    resp = client.chat.completions.create(**kwargs)
    content = resp.choices[0].message.content if resp.choices else None
    if not content:
        raise RuntimeError("Empty response from AI provider")
    return content


def parse_json_object(text: str) -> Dict:
    """Parse a JSON object from a model reply, tolerating surrounding prose."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    start = text.find("{")
    end = text.rfind("}") + 1
    if start >= 0 and end > start:
        return json.loads(text[start:end])
    raise ValueError("No JSON object in AI response")


def _clamp(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, score))


def _match_prompt(job: Dict) -> str:
    skills = USER_PROFILE["skills"]
    description = (job.get("description") or "")[:MAX_DESCRIPTION_CHARS]
    return f"""
Rate how well this job fits the candidate.

CANDIDATE:
- Title: {USER_PROFILE['title']}
- Experience: {USER_PROFILE['years_of_experience']} years
- Expert skills: {', '.join(skills['expert'])}
- Proficient skills: {', '.join(skills['proficient'])}
- Familiar skills: {', '.join(skills['familiar'])}
- Domains: {', '.join(USER_PROFILE['domains'])}
- Location: {USER_PROFILE['location']} (remote preferred)
- Preferred locations: {', '.join(SEARCH_CRITERIA['locations'])}
- Target experience: {SEARCH_CRITERIA['experience']['min']}-{SEARCH_CRITERIA['experience']['max']} years
- Avoid: {', '.join(SEARCH_CRITERIA['exclude_keywords'])}

JOB:
- Title: {job.get('title')}
- Company: {job.get('company_name')}
- Location: {job.get('location') or 'Not specified'}
- Description: {description}

Reply with JSON only:
{{"score": 0.0-1.0, "reason": "one or two sentences", "shouldApply": true/false,
  "highlights": ["..."], "concerns": ["..."]}}
"""


def match_job(job: Dict) -> Dict:
    """
    Score a job for the candidate.

    Returns {score, reason, should_apply, highlights, concerns}; ``should_apply``
    also requires the score to reach AI_MATCH_THRESHOLD.
    """
    if not ai_enabled():
        return fallback_match(job)

    try:
        reply = complete_text(
            _match_prompt(job),
            system="You are an expert technical recruiter. Always respond with valid JSON only.",
            temperature=0.3,
            max_tokens=1000,
            json_mode=True,
        )
        data = parse_json_object(reply)
    except Exception as e:
        log.error("AI match failed, using keyword matching", extra={"title": job.get("title"), "error": str(e)})
        return fallback_match(job)

    score = _clamp(data.get("score"))
    should_apply = bool(data.get("shouldApply", data.get("should_apply", False)))
    return {
        "score": score,
        "reason": str(data.get("reason") or ""),
        "should_apply": should_apply and score >= config.AI_MATCH_THRESHOLD,
        "highlights": list(data.get("highlights") or []),
        "concerns": list(data.get("concerns") or []),
    }


def fallback_match(job: Dict) -> Dict:
    """Keyword scoring: must-have 50%, preferred 30%, location 20%, halved on excluded keywords."""
    description = (job.get("description") or "").lower()
    title = (job.get("title") or "").lower()
    location = (job.get("location") or "").lower()

    must_have = SEARCH_CRITERIA["must_have_skills"]
    preferred = SEARCH_CRITERIA["preferred_skills"]

    must_count = sum(1 for s in must_have if s.lower() in description or s.lower() in title)
    preferred_count = sum(1 for s in preferred if s.lower() in description)
    has_excluded = any(
        k.lower() in title or k.lower() in description for k in SEARCH_CRITERIA["exclude_keywords"]
    )
    location_match = any(loc.lower() in location for loc in SEARCH_CRITERIA["locations"])

    score = 0.0
    score += (must_count / len(must_have)) * 0.5 if must_have else 0.0
    score += (preferred_count / len(preferred)) * 0.3 if preferred else 0.0
    score += 0.2 if location_match else 0.0
    if has_excluded:
        score *= 0.5

    return {
        "score": round(score, 4),
        "reason": "Keyword matching (no AI provider available)",
        "should_apply": score >= config.AI_MATCH_THRESHOLD and not has_excluded,
        "highlights": [f"Matches {must_count} required skills"] if must_count else [],
        "concerns": ["Contains excluded keywords"] if has_excluded else [],
    }


def template_cover_letter(job: Dict) -> str:
    expert = USER_PROFILE["skills"]["expert"]
    achievements = "\n".join(f"- {a}" for a in USER_PROFILE["achievements"][:2])
    return (
        f"Dear Hiring Manager,\n\n"
        f"I am excited to apply for the {job.get('title')} position at {job.get('company_name')}. "
        f"As a {USER_PROFILE['title']} with {USER_PROFILE['years_of_experience']}+ years of experience "
        f"in {', '.join(expert[:4])}, I build scalable, well-tested systems end to end.\n\n"
        f"Recent highlights:\n{achievements}\n\n"
        f"I would welcome the chance to discuss how I can contribute to your team.\n\n"
        f"Best regards,\n{USER_PROFILE['name']}"
    )


def generate_cover_letter(job: Dict) -> Dict:
    """Return {cover_letter, key_points} for a job."""
    fallback = {
        "cover_letter": template_cover_letter(job),
        "key_points": ["Full Stack Development expertise", "Scalable system design", "Team collaboration"],
    }
    if not ai_enabled():
        return fallback

    achievements = "\n".join(f"  - {a}" for a in USER_PROFILE["achievements"])
    prompt = f"""
Write a concise, professional cover letter for this job application.

CANDIDATE:
- Name: {USER_PROFILE['name']}
- Title: {USER_PROFILE['title']}
- Experience: {USER_PROFILE['years_of_experience']} years
- Key skills: {', '.join(USER_PROFILE['skills']['expert'])}
- Achievements:
{achievements}

JOB:
- Title: {job.get('title')}
- Company: {job.get('company_name')}
- Description: {(job.get('description') or '')[:1500]}

Keep it under 200 words and specific to the role.
Reply with JSON only: {{"coverLetter": "...", "keyPoints": ["...", "..."]}}
"""
    try:
        reply = complete_text(
            prompt,
            system="You are a professional cover letter writer. Always respond with valid JSON only.",
            temperature=0.7,
            max_tokens=1000,
            json_mode=True,
        )
        data = parse_json_object(reply)
    except Exception as e:
        log.error("Cover letter generation failed, using template", extra={"error": str(e)})
        return fallback

    letter = data.get("coverLetter") or data.get("cover_letter")
    if not letter:
        return fallback
    key_points: List[str] = list(data.get("keyPoints") or data.get("key_points") or [])
    return {"cover_letter": letter, "key_points": key_points}


__all__ = [
    "PROVIDERS",
    "ai_enabled",
    "complete_text",
    "parse_json_object",
    "match_job",
    "fallback_match",
    "generate_cover_letter",
    "template_cover_letter",
]
