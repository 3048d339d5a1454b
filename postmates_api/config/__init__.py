from .settings import DEFAULT_SETTINGS, POSTMATES_DOMAIN, PROXY_ENV_VARS
from .headers import HEADER_PROFILES, headers_for
