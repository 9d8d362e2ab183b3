"""
Browser login: open Chrome, let the user log in by hand, then read back the
session (cookies, localStorage values, page title) for the HTTP fetchers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import requests
from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from webdriver_manager.chrome import ChromeDriverManager

from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class BrowserSession:
    cookies: List[Dict] = field(default_factory=list)
    local_storage: Dict[str, Optional[str]] = field(default_factory=dict)
    title: str = ""
    element_text: Optional[str] = None

    def to_requests_session(self) -> requests.Session:
        session = requests.Session()
        for c in self.cookies:
            session.cookies.set(c["name"], c["value"], domain=c.get("domain"), path=c.get("path", "/"))
        return session


def create_driver() -> webdriver.Chrome:
    """Create a Chrome WebDriver instance."""
    options = Options()
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--window-size=1200,900")
    try:
        service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=service, options=options)
    except Exception as e:
        raise TransportError(
            f"Could not start Chrome. Install Chrome and run again.\nError: {e}"
        ) from e


def capture_login_session(
    url: str,
    storage_keys: Sequence[str] = (),
    text_selector: str | None = None,
) -> BrowserSession:
    """
    Open ``url``, wait for the user to log in and press Enter, then capture
    cookies, the requested localStorage keys and the text of ``text_selector``.
    """
    driver = create_driver()
    try:
        driver.get(url)
        print()
        print("请在浏览器中：")
        print("  1. 登录教务系统")
        print("  2. 等待首页加载完成")
        print("  3. 回到本终端，按回车键继续")
        print()
        input("完成上述步骤后按回车键 → ")

        storage = {
            key: driver.execute_script("return window.localStorage.getItem(arguments[0]);", key)
            for key in storage_keys
        }
        text = None
        if text_selector:
            try:
                text = driver.find_element(By.CSS_SELECTOR, text_selector).text
            except NoSuchElementException:
                logger.warning("Element %s not found on %s", text_selector, driver.current_url)
        return BrowserSession(
            cookies=driver.get_cookies(),
            local_storage=storage,
            title=driver.title or "",
            element_text=text,
        )
    finally:
        driver.quit()
