import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from urllib.parse import urlencode

from core import config, platforms
from worker.browser import BrowserSession, extract_skills

SEARCH_URL = platforms.PLATFORM_CONFIG[platforms.LINKEDIN]["search_url"]
LOGIN_URL = platforms.PLATFORM_CONFIG[platforms.LINKEDIN]["login_url"]
MAX_CARDS = 25

CARD_SELECTOR = ".job-card-container, .jobs-search-results__list-item"
CARD_LINK = "a.job-card-container__link, a.job-card-list__title"

_JOB_ID_RE = re.compile(r"/jobs/view/(\d+)")


def build_search_url(keyword: str, location: str) -> str:
    params = {
        "keywords": keyword,
        "location": location,
        "f_TPR": "r86400",  # past 24 hours
        "f_WT": "2",  # remote
        "f_E": "3,4",  # associate, mid-senior
    }
    return f"{SEARCH_URL}?{urlencode(params)}"


def parse_job_id(href: Optional[str]) -> Optional[str]:
    m = _JOB_ID_RE.search(href or "")
    return m.group(1) if m else None


def parse_posted_date(text: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
    """'3 days ago' style text -> ISO timestamp, None when not understood."""
    now = now or datetime.now(timezone.utc)
    lower = (text or "").lower()
    if "just now" in lower or "moment" in lower:
        return now.isoformat(timespec="seconds")
    for pattern, unit in ((r"(\d+)\s*hour", "hours"), (r"(\d+)\s*day", "days"), (r"(\d+)\s*week", "weeks")):
        m = re.search(pattern, lower)
        if m:
            return (now - timedelta(**{unit: int(m.group(1))})).isoformat(timespec="seconds")
    return None


class LinkedInScraper:
    platform = platforms.LINKEDIN

    def __init__(self):
        self.session = BrowserSession("linkedin")
        self.logged_in = False

    @property
    def page(self):
        return self.session.page

    async def initialize(self) -> None:
        await self.session.start()

    async def login(self) -> bool:
        if not self.page:
            raise RuntimeError("Scraper not initialized. Call initialize() first.")
        if not (config.LINKEDIN_EMAIL and config.LINKEDIN_PASSWORD):
            print("[engine_linkedin] Credentials not configured")
            return False

        try:
            print("[engine_linkedin] Logging in...")
            await self.page.goto(LOGIN_URL, wait_until="networkidle")
            await self.session.delay(2000)
            if "feed" in self.page.url or "jobs" in self.page.url:
                self.logged_in = True
                return True

            await self.session.human_type("#username", config.LINKEDIN_EMAIL)
            await self.session.delay(500)
            await self.session.human_type("#password", config.LINKEDIN_PASSWORD)
            await self.session.delay(500)
            await self.page.click('button[type="submit"]')
            await self.page.wait_for_load_state("networkidle", timeout=30000)
            await self.session.delay(3000)

            if "checkpoint" in self.page.url or "challenge" in self.page.url:
                print("[engine_linkedin] Security checkpoint, manual verification needed")
                await self.session.take_screenshot("security_checkpoint")
                return False
            if "feed" in self.page.url or "jobs" in self.page.url:
                print("[engine_linkedin] Login successful")
                self.logged_in = True
                return True

            await self.session.take_screenshot("login_failed")
            return False
        except Exception as e:
            print(f"[engine_linkedin] Login error: {e}")
            await self.session.take_screenshot("login_error")
            return False

    async def _scroll(self) -> None:
        for _ in range(5):
            await self.page.evaluate("window.scrollBy(0, window.innerHeight)")
            await self.session.delay(1000)
        await self.page.evaluate("window.scrollTo(0, 0)")

    async def _card_to_job(self, card) -> Optional[Dict]:
        link = await card.query_selector(CARD_LINK)
        if not link:
            return None
        external_id = parse_job_id(await link.get_attribute("href"))
        if not external_id:
            return None
        return {
            "external_id": external_id,
            "title": await self.session.safe_get_text(".job-card-list__title, .job-card-container__link span", card),
            "company_name": await self.session.safe_get_text(
                ".job-card-container__company-name, .job-card-container__primary-description", card
            ),
            "location": await self.session.safe_get_text(".job-card-container__metadata-item", card),
            "description": "",
            "url": f"https://www.linkedin.com/jobs/view/{external_id}",
            "is_easy_apply": bool(await card.query_selector(".job-card-container__apply-method, .jobs-apply-button")),
            "skills": [],
        }

    async def scrape_job_details(self, job: Dict) -> Dict:
        """Fill description, skills, salary and posted date from the job page."""
        try:
            await self.page.goto(job["url"], wait_until="networkidle")
            await self.session.delay(2000)
            description = await self.session.safe_get_text(".jobs-description__content, .description__text")
            title = await self.session.safe_get_text(".job-details-jobs-unified-top-card__job-title h1, .top-card-layout__title")
            company = await self.session.safe_get_text(
                ".job-details-jobs-unified-top-card__company-name, .topcard__org-name-link"
            )
            posted = await self.session.safe_get_text(".jobs-unified-top-card__posted-date, .posted-time-ago__text")
            easy_apply = await self.page.query_selector('.jobs-apply-button--top-card, button[aria-label*="Easy Apply"]')
            job.update(
                {
                    "title": title or job["title"],
                    "company_name": company or job["company_name"],
                    "description": description,
                    "skills": extract_skills(description),
                    "salary_range": await self.session.safe_get_text(".compensation__salary, .salary-main-rail__salary") or None,
                    "posted_at": parse_posted_date(posted),
                    "is_easy_apply": job["is_easy_apply"] or bool(easy_apply),
                }
            )
        except Exception as e:
            print(f"[engine_linkedin] Failed to load details for {job['url']}: {e}")
        return job

    async def search_jobs(self, keyword: str, location: str) -> List[Dict]:
        if not self.page:
            raise RuntimeError("Scraper not initialized")

        jobs: List[Dict] = []
        try:
            print(f"[engine_linkedin] Searching: {keyword} in {location}")
            await self.page.goto(build_search_url(keyword, location), wait_until="networkidle")
            await self.session.delay(2000)
            await self._scroll()
            cards = await self.page.query_selector_all(CARD_SELECTOR)
            print(f"[engine_linkedin] Found {len(cards)} job cards")
            for card in cards[:MAX_CARDS]:
                try:
                    job = await self._card_to_job(card)
                except Exception:
                    continue
                if job:
                    jobs.append(job)

            for job in jobs:
                await self.scrape_job_details(job)
                await self.session.delay(platforms.PLATFORM_CONFIG[self.platform]["delay_between_requests_ms"] // 2)
        except Exception as e:
            print(f"[engine_linkedin] Search error for {keyword} in {location}: {e}")

        return [j for j in jobs if j.get("title") and j.get("company_name")]

    async def close(self) -> None:
        await self.session.close()
