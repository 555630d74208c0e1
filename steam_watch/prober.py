"""
Status prober for Steam community profile pages.

Signals read from the page:
  - '.profile_in_game_header' containing 'In-Game'  => active (currently playing)
  - first '.recent_games .game_info' block           => game name, store link, icon

Anything missing from the page degrades to an empty field; parsing never raises.
"""

import logging
from typing import Optional, Tuple

import requests
from bs4 import BeautifulSoup

from .config import USER_AGENT
from .models import StatusSnapshot

logger = logging.getLogger(__name__)


# ---------- HTTP ----------
def build_session(user_agent: str = USER_AGENT) -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": user_agent})
    return s


def fetch_page(session: requests.Session, url: str, timeout: Optional[float] = None) -> Tuple[Optional[str], Optional[int]]:
    try:
        r = session.get(url, timeout=timeout, allow_redirects=True)
        if r.status_code == 200:
            return r.text, r.status_code
        return None, r.status_code
    except requests.RequestException as e:
        logger.warning("Fetch error for %s: %s", url, e)
        return None, None


# ---------- Parsing ----------
def detect_in_game(soup: BeautifulSoup) -> bool:
    for header in soup.select(".profile_in_game_header"):
        if "In-Game" in header.get_text():
            return True
    return False


def extract_recent_game(soup: BeautifulSoup) -> Tuple[str, str, str]:
    """
    (name, link, icon) of the first recent game that has a name.
    Empty strings when the profile lists none or hides them.
    """
    for info in soup.select(".recent_games .game_info"):
        name_el = info.select_one(".game_name > a")
        name = name_el.get_text(strip=True) if name_el else ""
        if not name:
            continue
        link_el = info.select_one(".game_info_cap > a")
        icon_el = info.select_one(".game_info_cap img")
        link = (link_el.get("href") or "") if link_el else ""
        icon = (icon_el.get("src") or "") if icon_el else ""
        return name, link, icon
    return "", "", ""


def parse_status(html: str) -> StatusSnapshot:
    soup = BeautifulSoup(html, "html.parser")
    active = detect_in_game(soup)
    if not active:
        return StatusSnapshot(reachable=True, active=False)
    name, link, icon = extract_recent_game(soup)
    return StatusSnapshot(reachable=True, active=True, label=name, link=link, icon=icon)


def probe_status(session: requests.Session, url: str, timeout: Optional[float] = None) -> Tuple[Optional[StatusSnapshot], Optional[int]]:
    """
    Fetch and parse one profile.
    Returns (snapshot, 200) on success, (None, status) for any other response
    and (None, None) when the request itself failed.
    """
    html, status = fetch_page(session, url, timeout=timeout)
    if html is None:
        return None, status
    return parse_status(html), status
