import urllib.parse
from functools import wraps


def sanitize_field(field):
    return urllib.parse.quote(field.encode("UTF-8"), safe="")


def sanitize_string_args(function):
    """Helper decorator that ensures that all string arguments passed are url-safe.

    Used on route builders that interpolate caller supplied names and ids into paths.
    """

    @wraps(function)
    def sanitized_function(*args, **kwargs):
        sanitized_args = []
        sanitized_kwargs = {}
        for arg in args:
            if isinstance(arg, str):
                arg = sanitize_field(arg)
            sanitized_args.append(arg)
        for key, value in kwargs.items():
            if isinstance(value, str):
                value = sanitize_field(value)
            sanitized_kwargs[key] = value
        return function(*sanitized_args, **sanitized_kwargs)

    return sanitized_function


def is_valid_webhook_url(url: str) -> bool:
    parsed = urllib.parse.urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
