import re
import time
from typing import Dict, List, Optional
from urllib.parse import urlencode

from core import config, platforms
from worker.browser import BrowserSession, extract_skills

LOGIN_URL = platforms.PLATFORM_CONFIG[platforms.NAUKRI]["login_url"]
MAX_CARDS = 25
REMOTE_LOCATIONS = ("remote", "work from home")

LOGGED_IN_INDICATORS = [
    ".nI-gNb-drawer__icon",
    ".user-initials",
    '[class*="user-icon"]',
    '[class*="profile-icon"]',
    ".nI-gNb-icon",
    'a[href*="logout"]',
]
EMAIL_FIELDS = [
    'input[type="text"][placeholder*="Email"]',
    'input[type="email"]',
    "input#usernameField",
    'input[name="username"]',
    'input[name="email"]',
    'form input[type="text"]',
]
PASSWORD_FIELDS = [
    'input[type="password"]',
    "input#passwordField",
    'input[name="password"]',
]
LOGIN_BUTTONS = [
    'button[type="submit"]',
    'button:has-text("Login")',
    'button:has-text("Sign in")',
    'input[type="submit"]',
    "form button",
]

_JOB_ID_RE = re.compile(r"jid=(\w+)|[/-](\d{6,})(?:\?|$)")


def build_search_url(keyword: str, location: str) -> str:
    kw = re.sub(r"\s+", "-", keyword.strip().lower())
    loc = re.sub(r"\s+", "-", location.strip().lower())
    url = f"https://www.naukri.com/{kw}-jobs"
    if location.strip().lower() != "remote":
        url += f"-in-{loc}"
    params = {"experience": "3", "jobAge": "1"}
    if location.strip().lower() in REMOTE_LOCATIONS:
        params["wfhType"] = "0"
    return f"{url}?{urlencode(params)}"


def parse_job_id(href: Optional[str]) -> Optional[str]:
    m = _JOB_ID_RE.search(href or "")
    if not m:
        return None
    return m.group(1) or m.group(2)


class NaukriScraper:
    platform = platforms.NAUKRI

    def __init__(self, persistent: bool = False):
        self.session = BrowserSession("naukri", persistent=persistent)
        self.logged_in = False

    @property
    def page(self):
        return self.session.page

    async def initialize(self) -> None:
        await self.session.start()

    async def _fill_first(self, selectors: List[str], value: str) -> bool:
        for selector in selectors:
            try:
                field = await self.page.query_selector(selector)
                if field and await field.is_visible():
                    await field.click()
                    await self.session.delay(300)
                    await field.fill(value)
                    return True
            except Exception:
                continue
        return False

    async def _has_any(self, selectors: List[str]) -> bool:
        for selector in selectors:
            try:
                if await self.page.query_selector(selector):
                    return True
            except Exception:
                continue
        return False

    async def login(self) -> bool:
        if not self.page:
            raise RuntimeError("Scraper not initialized. Call initialize() first.")
        if not (config.NAUKRI_EMAIL and config.NAUKRI_PASSWORD):
            print("[engine_naukri] Credentials not configured")
            return False

        try:
            print("[engine_naukri] Logging in...")
            await self.page.goto(LOGIN_URL, wait_until="domcontentloaded")
            await self.session.delay(3000)
            if await self._has_any(LOGGED_IN_INDICATORS):
                print("[engine_naukri] Already logged in")
                self.logged_in = True
                return True

            try:
                await self.page.wait_for_selector('form, [class*="login"]', timeout=10000)
            except Exception:
                pass

            if not await self._fill_first(EMAIL_FIELDS, config.NAUKRI_EMAIL):
                print("[engine_naukri] Could not find email field")
                await self.session.take_screenshot("no_email_field")
                return False
            await self.session.delay(1000)
            if not await self._fill_first(PASSWORD_FIELDS, config.NAUKRI_PASSWORD):
                print("[engine_naukri] Could not find password field")
                await self.session.take_screenshot("no_password_field")
                return False
            await self.session.delay(1000)

            if not await self.session.click_first_visible(LOGIN_BUTTONS):
                await self.page.keyboard.press("Enter")
                print("[engine_naukri] Pressed Enter to submit login form")

            try:
                await self.page.wait_for_load_state("networkidle", timeout=30000)
            except Exception:
                pass
            await self.session.delay(4000)

            if await self._has_any(LOGGED_IN_INDICATORS) or "login" not in self.page.url:
                print("[engine_naukri] Login successful")
                self.logged_in = True
                await self.session.take_screenshot("login_success")
                return True

            await self.session.take_screenshot("login_failed")
            return False
        except Exception as e:
            print(f"[engine_naukri] Login error: {e}")
            await self.session.take_screenshot("login_error")
            return False

    async def _card_to_job(self, card) -> Optional[Dict]:
        link = await card.query_selector('a.title, a[class*="title"]')
        if not link:
            return None
        href = await link.get_attribute("href")
        if not href:
            return None
        tags = await self.session.safe_get_text(".tags, .skills, ul.tags", card)
        return {
            "external_id": parse_job_id(href) or f"naukri_{int(time.time() * 1000)}",
            "title": (await link.inner_text()).strip(),
            "company_name": await self.session.safe_get_text('.companyInfo a, .comp-name, a[class*="subTitle"]', card),
            "location": await self.session.safe_get_text('.location, .locWdth, span[class*="loc"]', card),
            "experience_range": await self.session.safe_get_text('.experience, .expwdth, span[class*="exp"]', card) or None,
            "salary_range": await self.session.safe_get_text('.salary, span[class*="sal"]', card) or None,
            "description": "",
            "url": href if href.startswith("http") else f"https://www.naukri.com{href}",
            "is_easy_apply": bool(await card.query_selector('.apply-button, button[class*="apply"]')),
            "skills": extract_skills(tags),
        }

    async def scrape_job_details(self, job: Dict) -> Dict:
        try:
            await self.page.goto(job["url"], wait_until="networkidle")
            await self.session.delay(2000)
            description = await self.session.safe_get_text(".job-desc, .jd-desc, section.job-desc")
            key_skills = await self.session.safe_get_text(".key-skill, .chip-container, .tags")
            job["description"] = description
            job["skills"] = sorted(set(job["skills"]) | set(extract_skills(f"{description} {key_skills}")))
            if await self.page.query_selector('button.apply-button, button[class*="apply"]'):
                job["is_easy_apply"] = True
        except Exception as e:
            print(f"[engine_naukri] Failed to load details for {job['url']}: {e}")
        return job

    async def search_jobs(self, keyword: str, location: str) -> List[Dict]:
        if not self.page:
            raise RuntimeError("Scraper not initialized")

        jobs: List[Dict] = []
        try:
            print(f"[engine_naukri] Searching: {keyword} in {location}")
            await self.page.goto(build_search_url(keyword, location), wait_until="networkidle")
            await self.session.delay(2000)
            for _ in range(3):
                await self.page.evaluate("window.scrollBy(0, window.innerHeight)")
                await self.session.delay(1000)

            cards = await self.page.query_selector_all(".jobTuple, .cust-job-tuple, article.jobTuple")
            print(f"[engine_naukri] Found {len(cards)} job cards")
            for card in cards[:MAX_CARDS]:
                try:
                    job = await self._card_to_job(card)
                except Exception:
                    continue
                if job:
                    jobs.append(job)

            for job in jobs:
                await self.scrape_job_details(job)
        except Exception as e:
            print(f"[engine_naukri] Search error for {keyword} in {location}: {e}")

        return [j for j in jobs if j.get("title") and j.get("company_name")]

    async def close(self) -> None:
        await self.session.close()
