import logging
import re

from sentry_reporter.extensions.base import Extension
from sentry_reporter.models import BrowserContext, Event
from sentry_reporter.request import InboundRequest

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
BOT = "bot"

# First match wins: vendor forks of Chromium must come before chrome, and the bot
# signatures are the catch-all at the end.  Group 1 is the version (or bot name).
DEFAULT_BROWSER_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"AOLShield/([0-9._]+)"), "aol"),
    (re.compile(r"Edge/([0-9._]+)"), "edge"),
    (re.compile(r"YaBrowser/([0-9._]+)"), "yandexbrowser"),
    (re.compile(r"Vivaldi/([0-9.]+)"), "vivaldi"),
    (re.compile(r"KAKAOTALK\s([0-9.]+)"), "kakaotalk"),
    (re.compile(r"SamsungBrowser/([0-9.]+)"), "samsung"),
    (re.compile(r"(?!Chrom.*OPR)Chrom(?:e|ium)/([0-9.]+)(?:\s|$)"), "chrome"),
    (re.compile(r"PhantomJS/([0-9.]+)(?:\s|$)"), "phantomjs"),
    (re.compile(r"CriOS/([0-9.]+)(?:\s|$)"), "crios"),
    (re.compile(r"Firefox/([0-9.]+)(?:\s|$)"), "firefox"),
    (re.compile(r"FxiOS/([0-9.]+)"), "fxios"),
    (re.compile(r"Opera/([0-9.]+)(?:\s|$)"), "opera"),
    (re.compile(r"OPR/([0-9.]+)(?:\s|$)$"), "opera"),
    (re.compile(r"Trident/7\.0.*rv:([0-9.]+).*\).*Gecko$"), "ie"),
    (re.compile(r"MSIE\s([0-9.]+);.*Trident/[4-7].0"), "ie"),
    (re.compile(r"MSIE\s(7\.0)"), "ie"),
    (re.compile(r"BB10;\sTouch.*Version/([0-9.]+)"), "bb10"),
    (re.compile(r"Android\s([0-9.]+)"), "android"),
    (re.compile(r"Version/([0-9._]+).*Mobile.*Safari.*"), "ios"),
    (re.compile(r"Version/([0-9._]+).*Safari"), "safari"),
    (re.compile(r"FBAV/([0-9.]+)"), "facebook"),
    (re.compile(r"Instagram\s([0-9.]+)"), "instagram"),
    (re.compile(r"AppleWebKit/([0-9.]+).*Mobile"), "ios-webview"),
    (
        re.compile(
            r"(nuhk|slurp|ask jeeves/teoma|ia_archiver|alexa|crawl|crawler|crawling"
            r"|facebookexternalhit|feedburner|google web preview|nagios|postrank"
            r"|pingdom|slurp|spider|yahoo!|yandex|\w+bot)",
            re.IGNORECASE,
        ),
        BOT,
    ),
]

DEFAULT_OS_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"iP(hone|od|ad)"), "iOS"),
    (re.compile(r"Android"), "Android OS"),
    (re.compile(r"BlackBerry|BB10"), "BlackBerry OS"),
    (re.compile(r"IEMobile"), "Windows Mobile"),
    (re.compile(r"Kindle"), "Amazon OS"),
    (re.compile(r"Win16"), "Windows 3.11"),
    (re.compile(r"(Windows 95)|(Win95)|(Windows_95)"), "Windows 95"),
    (re.compile(r"(Windows 98)|(Win98)"), "Windows 98"),
    (re.compile(r"(Windows NT 5.0)|(Windows 2000)"), "Windows 2000"),
    (re.compile(r"(Windows NT 5.1)|(Windows XP)"), "Windows XP"),
    (re.compile(r"(Windows NT 5.2)"), "Windows Server 2003"),
    (re.compile(r"(Windows NT 6.0)"), "Windows Vista"),
    (re.compile(r"(Windows NT 6.1)"), "Windows 7"),
    (re.compile(r"(Windows NT 6.2)"), "Windows 8"),
    (re.compile(r"(Windows NT 6.3)"), "Windows 8.1"),
    (re.compile(r"(Windows NT 10.0)"), "Windows 10"),
    (re.compile(r"Windows ME"), "Windows ME"),
    (re.compile(r"OpenBSD"), "Open BSD"),
    (re.compile(r"SunOS"), "Sun OS"),
    (re.compile(r"(Linux)|(X11)"), "Linux"),
    (re.compile(r"(Mac_PowerPC)|(Macintosh)"), "Mac OS"),
    (re.compile(r"QNX"), "QNX"),
    (re.compile(r"BeOS"), "BeOS"),
    (re.compile(r"OS/2"), "OS/2"),
]


def classify_browser(
    user_agent: str, patterns: list[tuple[re.Pattern, str]] = DEFAULT_BROWSER_PATTERNS
) -> tuple[str, str | None]:
    """
    Returns (browser name, normalized version), or ("unknown", None) when no pattern
    matches.  For bots the "version" is the lower-cased bot name.
    """
    for pattern, name in patterns:
        match = pattern.search(user_agent)
        if match is None:
            continue
        version = match.group(1) if pattern.groups >= 1 else None
        if version:
            version = ".".join(re.split(r"[._]", version)).lower()
        return name, version or None
    return UNKNOWN, None


def classify_os(
    user_agent: str, patterns: list[tuple[re.Pattern, str]] = DEFAULT_OS_PATTERNS
) -> str:
    return next((os for pattern, os in patterns if pattern.search(user_agent)), UNKNOWN)


class ClientSniffer(Extension):
    """
    Derives the browser context (and browser tags) from the User-Agent header.

    Unrecognized agents keep the raw User-Agent string as the version, so they can
    still be told apart by hand.
    """

    def __init__(
        self,
        browser_patterns: list[tuple[re.Pattern, str]] | None = None,
        os_patterns: list[tuple[re.Pattern, str]] | None = None,
    ):
        self.browser_patterns = browser_patterns or list(DEFAULT_BROWSER_PATTERNS)
        self.os_patterns = os_patterns or list(DEFAULT_OS_PATTERNS)

    def apply(
        self, event: Event, exception: BaseException, request: InboundRequest | None
    ) -> None:
        if request is None:
            return

        user_agent = request.get_header("User-Agent")
        if not user_agent:
            return

        browser, version = classify_browser(user_agent, self.browser_patterns)

        if browser == BOT:
            event.add_context(BrowserContext(name=f"{BOT}/{version or UNKNOWN}"))
            return

        if browser == UNKNOWN or version is None:
            event.add_context(BrowserContext(name=browser, version=user_agent))
            return

        os = classify_os(user_agent, self.os_patterns)

        event.add_tag(f"browser.{browser}", version)
        event.add_tag("browser.os", os)
        event.add_context(BrowserContext(name=browser, version=f"{version}/{os}"))
