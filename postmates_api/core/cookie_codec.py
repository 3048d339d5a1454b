"""
Cookie Codec — Conversions between the cookie shapes the Postmates API uses.

Three representations are involved:

  1. Raw Set-Cookie lines, as returned in response headers:
       "uev2.loc=...; Domain=postmates.com; Path=/; Secure"
  2. A cookie jar: a plain dict of cookie name -> value. This is the state a
     caller holds between workflow steps.
  3. The request "cookie" header: "name=value; name2=value2; "

Location data additionally needs a bespoke encoding before it can be placed in
the uev2.loc cookie (see encode_location_for_cookie).

All functions here are pure; none of them mutate their arguments.
"""

import json
from typing import Dict, Iterable, List, Optional, Union

from .errors import MalformedCookieError

CookieJar = Dict[str, str]


def lines_to_jar(lines: Optional[Iterable[str]]) -> CookieJar:
    """Convert raw Set-Cookie lines into a cookie jar.

    Only the "name=value" part before the first ";" is kept, untrimmed. The
    name/value split happens on the first "=" so values may themselves
    contain "=".
    Later lines overwrite earlier ones with the same name.

    Args:
        lines: Raw Set-Cookie header values. None or empty yields an empty jar.

    Returns:
        A new cookie jar.

    Raises:
        MalformedCookieError: If a line has no "=" in its name/value part.
    """
    jar: CookieJar = {}
    for line in lines or []:
        pair = line.split(";", 1)[0]
        if "=" not in pair:
            raise MalformedCookieError(line)
        name, value = pair.split("=", 1)
        jar[name] = value
    return jar


def jar_to_lines(jar: CookieJar) -> List[str]:
    """Render a cookie jar as bare "name=value" Set-Cookie lines."""
    return [f"{name}={value}" for name, value in jar.items()]


def jar_to_header_string(jar: Optional[CookieJar]) -> str:
    """Render a cookie jar as a request cookie header.

    The trailing "; " is intentional; it is what the Postmates frontend sends
    and the platform's cookie parser accepts it.
    """
    return "".join(f"{name}={value}; " for name, value in (jar or {}).items())


def merge_jars(*jars: Optional[CookieJar]) -> CookieJar:
    """Merge cookie jars left to right; the last write for a name wins.

    None entries are skipped, so a step that forwards no cookies can be merged
    without a special case.
    """
    merged: CookieJar = {}
    for jar in jars:
        if jar:
            merged.update(jar)
    return merged


def encode_location_for_cookie(location: Union[dict, str], is_string: bool = False) -> str:
    """Encode location details for the uev2.loc cookie.

    This is not URL encoding. The platform expects compact JSON with quotes
    written as %22 and no whitespace or backslashes at all:

      {"address": {"title": "123 Main St"}}  ->  {%22address%22:{%22title%22:%22123MainSt%22}}

    Args:
        location: The location details object, or an already serialized string.
        is_string: True if location is already a JSON string.

    Returns:
        The cookie-safe token.
    """
    text = location if is_string else json.dumps(location, ensure_ascii=False)
    return (
        text.replace("\t", "")
        .replace("\n", "")
        .replace('"', "%22")
        .replace(" ", "")
        .replace("\\", "")
    )


def rewrite_domain(lines: Optional[Iterable[str]], from_domain: str, to_domain: str) -> List[str]:
    """Point Set-Cookie lines minted for from_domain at to_domain instead.

    Used when cookies received from Postmates are handed back to a browser
    talking to this service, so the browser will store and resend them.
    Only the first occurrence in each line is replaced. An empty to_domain
    leaves the lines untouched.
    """
    lines = list(lines or [])
    if not to_domain:
        return lines
    return [line.replace(from_domain, to_domain, 1) for line in lines]
