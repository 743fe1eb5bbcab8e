"""
Shared Playwright session used by the scrapers and the applicator.
"""
from __future__ import annotations

import asyncio
import random
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from playwright.async_api import async_playwright

from core import config

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

STEALTH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
    "--window-size=1920,1080",
]

HIDE_WEBDRIVER_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-IN', 'en-US', 'en'] });
window.chrome = { runtime: {} };
"""

SKILL_KEYWORDS = [
    "javascript", "typescript", "python", "java", "go", "rust",
    "react", "angular", "vue", "next.js", "node.js", "express",
    "django", "flask", "fastapi", "spring", "graphql", "rest",
    "aws", "gcp", "azure", "docker", "kubernetes", "terraform",
    "postgresql", "mysql", "mongodb", "redis", "elasticsearch", "kafka",
    "git", "ci/cd", "microservices", "html", "css", "tailwind",
]


def extract_skills(text: Optional[str]) -> List[str]:
    """Known skill keywords found in free text, in list order."""
    lower = (text or "").lower()
    found = []
    for skill in SKILL_KEYWORDS:
        if re.search(r"(?<![a-z0-9])" + re.escape(skill) + r"(?![a-z0-9])", lower):
            found.append(skill)
    return found


class BrowserSession:
    """
    One chromium browser + context + page.

    With ``persistent=True`` cookies are kept in ``config.SESSION_DIR`` so a
    login survives between runs.
    """

    def __init__(self, platform: str, persistent: bool = False, headless: Optional[bool] = None):
        self.platform = platform
        self.persistent = persistent
        self.headless = config.HEADLESS if headless is None else headless
        self._playwright = None
        self.browser = None
        self.context = None
        self.page = None

    def _context_options(self) -> dict:
        return {
            "viewport": {"width": 1920, "height": 1080},
            "user_agent": random.choice(USER_AGENTS),
            "locale": "en-IN",
            "timezone_id": "Asia/Kolkata",
            "extra_http_headers": {"Accept-Language": "en-IN,en;q=0.9"},
        }

    async def start(self):
        self._playwright = await async_playwright().start()
        launch = {"headless": self.headless, "args": STEALTH_ARGS}
        if config.PROXY_ENABLED and config.PROXY_URL:
            launch["proxy"] = {"server": config.PROXY_URL}

        if self.persistent:
            user_dir = Path(config.SESSION_DIR) / self.platform
            user_dir.mkdir(parents=True, exist_ok=True)
            self.context = await self._playwright.chromium.launch_persistent_context(
                str(user_dir), **launch, **self._context_options()
            )
        else:
            self.browser = await self._playwright.chromium.launch(**launch)
            self.context = await self.browser.new_context(**self._context_options())

        await self.context.add_init_script(HIDE_WEBDRIVER_JS)
        self.page = self.context.pages[0] if self.context.pages else await self.context.new_page()
        print(f"[engine_{self.platform}] Browser started (headless={self.headless})")
        return self.page

    async def delay(self, base_ms: int = 1000) -> None:
        await asyncio.sleep((base_ms + random.random() * 2000) / 1000)

    async def human_type(self, selector: str, text: str) -> None:
        await self.page.click(selector)
        await self.page.fill(selector, "")
        for ch in text:
            await self.page.keyboard.type(ch, delay=random.randint(50, 150))

    async def safe_click(self, selector: str, timeout: int = 5000) -> bool:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout)
            await self.page.click(selector)
            return True
        except Exception:
            return False

    async def safe_get_text(self, selector: str, root=None) -> str:
        try:
            el = await (root or self.page).query_selector(selector)
            if not el:
                return ""
            return (await el.inner_text()).strip()
        except Exception:
            return ""

    async def click_first_visible(self, selectors: Iterable[str]) -> Optional[str]:
        """Click the first visible match; returns the selector used."""
        for selector in selectors:
            try:
                el = await self.page.query_selector(selector)
                if el and await el.is_visible():
                    await el.click()
                    return selector
            except Exception:
                continue
        return None

    async def take_screenshot(self, name: str) -> Optional[str]:
        if not self.page:
            return None
        Path(config.SCREENSHOT_DIR).mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d%H%M%S")
        path = Path(config.SCREENSHOT_DIR) / f"{self.platform}_{name}_{ts}.png"
        try:
            await self.page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            print(f"[engine_{self.platform}] Screenshot failed: {e}")
            return None
        return str(path)

    async def close(self) -> None:
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
        except Exception as e:
            print(f"[engine_{self.platform}] Error closing browser: {e}")
        finally:
            if self._playwright:
                await self._playwright.stop()
            self._playwright = self.browser = self.context = self.page = None
