"""
Vinted authentication: detect the signed-in state, log in when needed.

Signed-in state is always checked live on the site; a restored session file
is never trusted on its own.
"""
import logging

from vinted_publisher.schemas.article import Credentials
from vinted_publisher.services.browser_session import BrowserHandle
from vinted_publisher.services.errors import AuthenticationError
from vinted_publisher.services.vinted_driver import DriverTimeoutError, SiteDriver

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Login failed — check credentials"


async def check_authentication(driver: SiteDriver) -> bool:
    """Open the home page and look for the signed-in marker.

    A home page that never settles, or any other error while checking, counts as
    signed out.
    """
    logger.info("Checking authentication status...")
    try:
        await driver.open_home()
    except DriverTimeoutError as e:
        logger.warning("Home page timed out, treating as signed out: %s", e)
        return False
    except Exception as e:
        logger.warning("Home page failed to load, treating as signed out: %s", e)
        return False

    try:
        signed_in = await driver.check_signed_in()
    except Exception as e:
        logger.warning("Signed-in check failed, treating as signed out: %s", e)
        return False
    logger.info("Already authenticated" if signed_in else "Not authenticated")
    return signed_in


async def login(handle: BrowserHandle, credentials: Credentials) -> None:
    """Submit credentials once and verify. Saves the session on success."""
    driver = handle.driver
    logger.info("Logging in as %s...", credentials.email)

    try:
        await driver.login(credentials.email, credentials.password.get_secret_value())
    except DriverTimeoutError as e:
        # Still verified below: the marker decides
        logger.warning("Login did not navigate as expected: %s", e)
    except Exception as e:
        raise AuthenticationError(f"Login failed: {e}") from e

    try:
        signed_in = await driver.check_signed_in()
    except Exception as e:
        raise AuthenticationError(f"Login could not be verified: {e}") from e
    if not signed_in:
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)

    logger.info("Successfully logged in")
    await handle.persist_session()
