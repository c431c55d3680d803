import webbrowser
from typing import Optional, Tuple
from valorant_dashboard.clients.riot_auth_client import login_page_url
from valorant_dashboard.config.logging import get_logger

logger = get_logger("riot_auth.browser")


def launch_login_browser() -> Tuple[bool, Optional[str]]:
    """Open the Riot login page in the host's default browser.

    The user finishes the login there and pastes the final redirect URL
    back, which avoids the bot detection that automated logins run into.
    """
    try:
        opened = webbrowser.open(login_page_url())
    except webbrowser.Error as e:
        logger.error("Failed to open browser", error=str(e))
        return False, f"Failed to launch browser: {e}"

    if not opened:
        return False, "Failed to launch browser: no browser available"

    logger.info("Opened Riot login in default browser")
    return True, None
