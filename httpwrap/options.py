"""Request option composition."""

from collections.abc import Callable, Mapping
from typing import Any

from httpwrap.models import HttpMethod, RequestOptions


HeaderGenerator = Callable[[], Mapping[str, str]]


def merge_headers(
    base: Mapping[str, str], override: Mapping[str, str]
) -> dict[str, str]:
    """Merge two header mappings, ``override`` winning.

    Header names are compared case-insensitively, so ``{"x-id": "1"}`` merged
    with ``{"X-Id": "2"}`` gives ``{"X-Id": "2"}``.

    Args:
        base: Lower-precedence headers.
        override: Higher-precedence headers.

    Returns:
        New dictionary with one entry per header name.
    """
    replaced = {name.lower() for name in override}
    merged = {
        name: value for name, value in base.items() if name.lower() not in replaced
    }
    merged.update(override)
    return merged


def compose_options(
    method: HttpMethod,
    data: Any = None,
    options: RequestOptions | None = None,
    header_generator: HeaderGenerator | None = None,
) -> RequestOptions:
    """Produce the options a request is dispatched with.

    The payload goes under ``form`` when ``is_form`` is set, under
    ``json_data`` when it is not None, and nowhere otherwise. Headers from
    ``header_generator`` are computed fresh on every call and override the
    per-call headers of the same name, whatever their casing.

    Args:
        method: HTTP verb.
        data: Optional request payload.
        options: Caller-supplied options.
        header_generator: Optional callable producing extra headers.

    Returns:
        New options with body, headers and method resolved.
    """
    options = options or RequestOptions()
    headers = dict(options.headers)
    if header_generator is not None:
        headers = merge_headers(headers, header_generator())

    update: dict[str, Any] = {
        "method": method,
        "headers": headers,
        "json_data": None,
        "form": None,
    }
    if options.is_form:
        update["form"] = data
    elif data is not None:
        update["json_data"] = data

    return options.model_copy(update=update)
