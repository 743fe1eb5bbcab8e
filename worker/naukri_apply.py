"""
Naukri applicator: opens a job page in a logged-in browser and submits an
application (apply button, chatbot questions, form fields, resume upload).
"""
from typing import Dict, Optional

from core import config
from core.criteria import USER_PROFILE
from worker.naukri_engine import NaukriScraper, parse_job_id

MAX_CHATBOT_ROUNDS = 10

APPLIED_INDICATORS = [
    "text=Already Applied",
    ".already-applied",
    'button:has-text("Applied")',
]
APPLY_BUTTONS = [
    'button:has-text("Apply")',
    'button:has-text("Apply Now")',
    'button:has-text("Quick Apply")',
    'a:has-text("Apply")',
    ".apply-btn",
    ".apply-button",
    "#apply-button",
    'button[id*="apply"]',
    'button[class*="apply"]',
    ".jd-header-apply-btn",
]
SUBMIT_BUTTONS = [
    'button:has-text("Submit")',
    'button:has-text("Confirm")',
    'button:has-text("Send")',
    'button[type="submit"]',
    ".submit-btn",
    ".apply-submit",
]
FILE_INPUTS = [
    'input[type="file"]',
    'input[accept*="pdf"]',
    'input[name*="resume"]',
    'input[name*="cv"]',
]
SUCCESS_TEXTS = (
    "successfully applied",
    "application submitted",
    "thank you for applying",
    "applied successfully",
    "application sent",
)


def answer_for_question(question: Optional[str]) -> Optional[str]:
    """Profile answer for a chatbot/form prompt, None when unknown."""
    q = (question or "").lower()
    if "experience" in q or "years" in q:
        return str(USER_PROFILE["years_of_experience"])
    if "notice" in q:
        return USER_PROFILE["preferences"]["notice_period"]
    if "current ctc" in q or "current salary" in q:
        return str(USER_PROFILE["salary"]["current_ctc"])
    if "expected ctc" in q or "expected salary" in q:
        return str(USER_PROFILE["salary"]["expected_ctc"])
    if "location" in q or "city" in q:
        return USER_PROFILE["location"]
    if "name" in q:
        return USER_PROFILE["name"]
    if "email" in q:
        return USER_PROFILE["email"]
    if "phone" in q or "mobile" in q:
        return USER_PROFILE["phone"]
    return None


def _result(success: bool, screenshot_path=None, error_message=None, confirmation_id=None) -> Dict:
    return {
        "success": success,
        "screenshot_path": screenshot_path,
        "error_message": error_message,
        "confirmation_id": confirmation_id,
    }


class NaukriApplicator(NaukriScraper):
    def __init__(self):
        super().__init__(persistent=True)

    async def _already_applied(self) -> bool:
        for selector in APPLIED_INDICATORS:
            try:
                el = await self.page.query_selector(selector)
                if el and "applied" in ((await el.inner_text()) or "").lower():
                    return True
            except Exception:
                continue
        return False

    async def _click_apply(self) -> bool:
        for selector in APPLY_BUTTONS:
            try:
                button = await self.page.query_selector(selector)
                if not button or await button.get_attribute("disabled") is not None:
                    continue
                if not await button.is_visible():
                    continue
                await button.scroll_into_view_if_needed()
                await self.session.delay(500)
                await button.click()
                print(f"[engine_naukri] Clicked apply button: {selector}")
                return True
            except Exception:
                continue
        for selector in APPLY_BUTTONS[:4]:
            try:
                await self.page.click(selector, force=True, timeout=2000)
                return True
            except Exception:
                continue
        return False

    async def _answer_chatbot(self) -> None:
        for _ in range(MAX_CHATBOT_ROUNDS):
            await self.session.delay(1000)

            field = await self.page.query_selector('input[type="text"]:visible, textarea:visible')
            if field:
                answer = answer_for_question(await field.get_attribute("placeholder"))
                if answer:
                    await field.fill(answer)
                    await self.page.keyboard.press("Enter")
                    continue

            radios = await self.page.query_selector_all('input[type="radio"]')
            if radios:
                await radios[0].click()
                next_btn = await self.page.query_selector('button:has-text("Continue"), button:has-text("Next")')
                if next_btn:
                    await next_btn.click()
                continue

            dropdown = await self.page.query_selector("select:visible")
            if dropdown:
                await dropdown.select_option(index=1)
                continue
            break

    async def _fill_form_fields(self, cover_letter: str) -> None:
        mapping = {
            'input[name*="name"], input[placeholder*="Name"]': USER_PROFILE["name"],
            'input[name*="email"], input[placeholder*="Email"]': USER_PROFILE["email"],
            'input[name*="phone"], input[placeholder*="Mobile"]': USER_PROFILE["phone"],
            'input[name*="experience"], input[placeholder*="Experience"]': str(USER_PROFILE["years_of_experience"]),
            'input[name*="notice"], input[placeholder*="Notice"]': USER_PROFILE["preferences"]["notice_period"],
            'textarea[name*="cover"], textarea[placeholder*="Cover"]': cover_letter,
            'textarea[name*="message"], textarea[placeholder*="Message"]': cover_letter,
        }
        for selector, value in mapping.items():
            if not value:
                continue
            try:
                field = await self.page.query_selector(selector)
                if field and await field.is_visible() and not await field.input_value():
                    await field.fill(value)
            except Exception:
                continue

        for field in await self.page.query_selector_all('input[placeholder*="CTC"], input[name*="ctc"]'):
            answer = answer_for_question(await field.get_attribute("placeholder"))
            if answer:
                try:
                    await field.fill(answer)
                except Exception:
                    continue

    async def _upload_resume(self) -> None:
        if not config.RESUME_PATH.exists():
            print(f"[engine_naukri] Resume not found at {config.RESUME_PATH}")
            return
        for selector in FILE_INPUTS:
            try:
                file_input = await self.page.query_selector(selector)
                if file_input:
                    await file_input.set_input_files(str(config.RESUME_PATH))
                    await self.session.delay(2000)
                    return
            except Exception:
                continue

    async def _handle_apply_form(self, cover_letter: str) -> bool:
        try:
            await self.session.delay(1500)
            await self._answer_chatbot()
            await self._fill_form_fields(cover_letter)
            await self._upload_resume()
            await self.session.click_first_visible(SUBMIT_BUTTONS)
            return True
        except Exception as e:
            print(f"[engine_naukri] Apply form error: {e}")
            return False

    async def _verify_success(self) -> bool:
        try:
            content = (await self.page.content()).lower()
        except Exception:
            return False
        return any(t in content for t in SUCCESS_TEXTS)

    async def apply_to_job(self, url: str, cover_letter: str) -> Dict:
        if not self.page:
            raise RuntimeError("Applicator not initialized")
        if not self.logged_in and not await self.login():
            return _result(False, error_message="Failed to login to Naukri")

        ref = parse_job_id(url) or "job"
        try:
            await self.page.goto(url, wait_until="networkidle")
            await self.session.delay(2000)
            await self.session.take_screenshot(f"{ref}_before")

            if await self._already_applied():
                return _result(True, error_message="Already applied")

            if not await self._click_apply():
                shot = await self.session.take_screenshot(f"{ref}_no_apply_button")
                return _result(False, shot, "Could not find apply button")

            await self.session.delay(2000)
            if not await self._handle_apply_form(cover_letter):
                shot = await self.session.take_screenshot(f"{ref}_form_error")
                return _result(False, shot, "Failed to complete application form")

            await self.session.delay(3000)
            verified = await self._verify_success()
            shot = await self.session.take_screenshot(f"{ref}_{'success' if verified else 'final'}")
            if verified:
                return _result(True, shot, confirmation_id=ref)
            return _result(True, shot, "Application submitted but success not verified")
        except Exception as e:
            print(f"[engine_naukri] Error applying to {url}: {e}")
            shot = await self.session.take_screenshot(f"{ref}_error")
            return _result(False, shot, str(e))
