"""
Headers — Browser-like request headers sent with each Postmates API call.

The private web API only answers requests that look like they came from the
postmates.com frontend. These tables are pure configuration: the client looks
up the profile named by a step and sends it verbatim (plus the cookie header
when the step carries a cookie jar). Nothing here influences control flow.

Profiles:
  desktop_linux    Linux Chrome 109, used by the location and search steps
  mobile_android   Android Chrome 109, used by search suggestions
  minimal          Bare header set accepted by the store endpoint
  desktop_windows  Windows Chrome 110 with client hints, used by the cart steps
  desktop_windows_basic  Windows Chrome 110 without client hints (add-to-cart)
"""

_CHROME_109_LINUX = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/109.0.0.0 Safari/537.36"
)
_CHROME_109_ANDROID = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/109.0.0.0 Mobile Safari/537.36"
)
_CHROME_110_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/110.0.0.0 Safari/537.36"
)

_SAME_ORIGIN_FETCH = {
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-origin",
}

HEADER_PROFILES = {
    "desktop_linux": {
        "authority": "postmates.com",
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.8",
        "content-type": "application/json",
        "origin": "https://postmates.com",
        **_SAME_ORIGIN_FETCH,
        "sec-gpc": "1",
        "user-agent": _CHROME_109_LINUX,
        "x-csrf-token": "x",
    },
    "set_location": {
        "authority": "postmates.com",
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.6",
        "content-type": "application/json",
        "origin": "https://postmates.com",
        "referer": "https://postmates.com/",
        **_SAME_ORIGIN_FETCH,
        "sec-gpc": "1",
        "user-agent": _CHROME_109_LINUX,
        "x-csrf-token": "x",
    },
    "mobile_android": {
        "authority": "postmates.com",
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.9",
        "content-type": "application/json",
        "origin": "https://postmates.com",
        **_SAME_ORIGIN_FETCH,
        "sec-gpc": "1",
        "user-agent": _CHROME_109_ANDROID,
        "x-csrf-token": "x",
    },
    "minimal": {
        "authority": "postmates.com",
        "accept": "*/*",
        "content-type": "application/json",
        "dnt": "1",
        "x-csrf-token": "x",
    },
    "desktop_windows": {
        "authority": "postmates.com",
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.9",
        "content-type": "application/json",
        "dnt": "1",
        "origin": "https://postmates.com",
        "sec-ch-ua": '"Chromium";v="110", "Not A(Brand";v="24", "Google Chrome";v="110"',
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        **_SAME_ORIGIN_FETCH,
        "user-agent": _CHROME_110_WINDOWS,
        "x-csrf-token": "x",
    },
    "desktop_windows_basic": {
        "authority": "postmates.com",
        "accept": "*/*",
        "accept-language": "en-US,en;q=0.9",
        "content-type": "application/json",
        "dnt": "1",
        "origin": "https://postmates.com",
        "user-agent": _CHROME_110_WINDOWS,
        "x-csrf-token": "x",
    },
}


def headers_for(profile: str) -> dict:
    """Return a fresh copy of a header profile so callers may add to it."""
    return dict(HEADER_PROFILES[profile])
