"""
Persisted Vinted session (authentication cookies).

File format: {"cookies": [...]} where each cookie is whatever Playwright's
BrowserContext.cookies() returns. Anything unreadable counts as "no session".
"""
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_session(path: PathLike) -> Optional[List[dict]]:
    """Return the saved cookies, or None when there is no usable session."""
    session_path = Path(path)
    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info("No cached session at %s, login will be required", session_path)
        return None
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable session file %s: %s", session_path, e)
        return None

    cookies = data.get("cookies") if isinstance(data, dict) else None
    if not isinstance(cookies, list) or not cookies:
        logger.info("Session file %s holds no cookies", session_path)
        return None

    logger.info("Loaded %d cookies from %s", len(cookies), session_path)
    return cookies


def save_session(path: PathLike, cookies: List[dict]) -> bool:
    """Write cookies to disk. Failures are logged and reported as False."""
    session_path = Path(path)
    try:
        session_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"cookies": list(cookies)}, indent=2)
        session_path.write_text(payload, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        logger.error("Failed to save session to %s: %s", session_path, e)
        return False

    logger.info("Saved %d cookies to %s", len(cookies), session_path)
    return True
