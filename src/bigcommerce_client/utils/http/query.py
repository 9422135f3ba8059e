"""Query string encoding compatible with PHP's ``http_build_query``.

The API documents filters such as ``include_fields`` or ``id:in`` and
nested parameters in PHP notation, so nested mappings are flattened to
``parent[child]`` and sequences to ``parent[0]``.
"""

from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import urlencode


def flatten_params(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """Flatten a parameter mapping into ``(key, value)`` string pairs.

    Booleans become ``"1"``/``"0"`` and ``None`` values are dropped.

    :param params: Parameter mapping, possibly nested
    :type params: Optional[Mapping[str, Any]]
    :return: Ordered list of key/value pairs
    :rtype: List[Tuple[str, str]]
    """
    pairs: List[Tuple[str, str]] = []
    if not params:
        return pairs

    def _walk(key: str, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                _walk(f"{key}[{sub_key}]", sub_value)
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                _walk(f"{key}[{index}]", item)
        elif isinstance(value, bool):
            pairs.append((key, "1" if value else "0"))
        else:
            pairs.append((key, str(value)))

    for key, value in params.items():
        _walk(str(key), value)
    return pairs


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """Encode parameters as a URL query string (without the ``?``)."""
    return urlencode(flatten_params(params))


def append_query(url: str, params: Optional[Mapping[str, Any]]) -> str:
    """Append encoded parameters to ``url``; unchanged when there are none."""
    query = build_query(params)
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"
