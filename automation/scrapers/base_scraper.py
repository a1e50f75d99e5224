"""
Base Scraper Class
Browser lifecycle, rules loading and FieldEdge authentication shared by
the dashboard scrapers.
"""
import os
import json
import asyncio
from dotenv import load_dotenv
from playwright.async_api import async_playwright

load_dotenv()

RULES_FILE_PATH = os.getenv("RULES_FILE_PATH", "config/scraper_rules.json")


class BaseScraper:
    """
    Owns the Playwright browser, page and the scraping rules. Subclasses
    implement ``run`` and must call ``cleanup`` when done.
    """

    def __init__(self, rules_path=None):
        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

        self.fieldedge_email = os.getenv("DASH_EMAIL")
        self.fieldedge_password = os.getenv("DASH_PASSWORD")
        self.headless = os.getenv("SCRAPER_HEADLESS", "true").lower() in ("1", "true", "yes")

        self.rules = self._load_rules(rules_path or RULES_FILE_PATH)

    def _load_rules(self, path):
        """
        Load scraping rules from the JSON configuration file.

        The file holds an array; the first object is the active rule set.
        A missing or malformed file yields an empty rule set.
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            print(f"❌ Rules file not found at: {path}")
            return {}
        except json.JSONDecodeError as e:
            print(f"❌ Error parsing rules JSON: {e}")
            return {}

        if isinstance(data, list):
            return data[0] if data else {}
        return data if isinstance(data, dict) else {}

    async def initialize(self):
        """Launch the browser and open a fresh page."""
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                slow_mo=50
            )
            self.context = await self.browser.new_context()
            self.page = await self.context.new_page()
            print("✅ Browser initialized successfully.")
        except Exception as e:
            print(f"❌ Failed to initialize browser: {e}")
            raise

    async def login_fieldedge(self):
        """Authenticate to the FieldEdge dashboard."""
        if not self.fieldedge_email or not self.fieldedge_password:
            raise RuntimeError("DASH_EMAIL and DASH_PASSWORD must be set to log in to FieldEdge")

        try:
            await self.page.fill(self.rules.get('username_xpath'), self.fieldedge_email)
            await self.page.fill(self.rules.get('password_xpath'), self.fieldedge_password)

            async with self.page.expect_navigation(wait_until='domcontentloaded'):
                await self.page.click(self.rules.get('login_button_xpath'))

            print("✅ FieldEdge login successful.")
        except Exception as e:
            print(f"❌ FieldEdge login failed: {e}")
            raise

    async def perform_actions_by_xpaths(self, name='', action_list=None, value=None):
        """
        Execute click, right-click or input actions on elements by XPath.

        Args:
            name: Key to look up in the rules configuration
            action_list: Actions to use when ``name`` is not configured
            value: Value typed by 'input' actions
        """
        actions = self.rules.get(name, action_list or [])

        for item in actions:
            action = item.get("action", "")
            xpath = item.get("xpath", "")
            if not xpath:
                print("⚠️  Warning: Empty xpath in action configuration")
                continue

            element = self.page.locator(xpath)
            try:
                if await element.count() == 0:
                    print(f"⚠️  Element not found: {xpath}")
                    continue

                if action == "click":
                    await element.click(timeout=5000)
                elif action == "right_click":
                    await element.click(button="right", timeout=5000)
                elif action == "input" and value is not None:
                    await element.fill(str(value))
                else:
                    print(f"⚠️  Unsupported action '{action}' for: {xpath}")
                    continue

                await asyncio.sleep(1)
            except Exception as e:
                print(f"❌ Action '{action}' failed for xpath '{xpath}': {e}")

    async def cleanup(self):
        """Close the browser and stop Playwright."""
        try:
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
            print("✅ Browser cleanup completed.")
        except Exception as e:
            print(f"⚠️  Error during cleanup: {e}")
        finally:
            self.browser = None
            self.playwright = None
            self.page = None
