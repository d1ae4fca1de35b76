from core.browser.browser_service import ListingError, RemoteBrowser
from core.browser.listing_worker import ListingWorker
from core.browser.session import BrowserSession

__all__ = [
    "BrowserSession",
    "ListingError",
    "ListingWorker",
    "RemoteBrowser",
]
