"""URI pattern parsing and regex compilation.

Placeholders are written ``{name}`` or ``{name:regex}``. The default
regex matches one path segment. Braces inside a custom regex
(``{code:[a-z]{3}}``) are balanced by depth counting.

Compiled patterns are memoized in a process-wide cache. Reads are
lock-free; a miss compiles under a lock with a double check.
"""

import re
import threading
from dataclasses import dataclass

from wayfinder.errors import ConfigurationError

DEFAULT_PARAM_REGEX = r"[^/]+"


@dataclass(frozen=True, slots=True)
class PatternToken:
    """A parsed piece of a URI pattern.

    Literal:     ``/product/``      (is_param=False)
    Placeholder: ``{id:[0-9]+}``    (is_param=True, param_name="id", param_regex="[0-9]+")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_regex: str = DEFAULT_PARAM_REGEX


_regex_cache: dict[tuple[str, bool], re.Pattern[str]] = {}
_cache_lock = threading.Lock()


def parse_pattern(uri: str) -> list[PatternToken]:
    """Split *uri* into literal and placeholder tokens.

    Examples::

        "/users"             -> [PatternToken("/users")]
        "/users/{id}"        -> [PatternToken("/users/"), PatternToken("{id}", is_param=True, ...)]
        "/{id:[0-9]+}/edit"  -> [PatternToken("/"), PatternToken("{id:[0-9]+}", ...), PatternToken("/edit")]

    Raises ``ConfigurationError`` for unbalanced braces, empty or invalid
    parameter names and parameter names used twice.
    """
    tokens: list[PatternToken] = []
    seen: set[str] = set()
    literal_start = 0
    depth = 0
    param_start = 0

    for i, char in enumerate(uri):
        if char == "{":
            if depth == 0:
                if i > literal_start:
                    tokens.append(PatternToken(uri[literal_start:i]))
                param_start = i
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                msg = f"Unbalanced '}}' at position {i} in URI pattern {uri!r}."
                raise ConfigurationError(msg)
            if depth == 0:
                tokens.append(_placeholder(uri, uri[param_start : i + 1], seen))
                literal_start = i + 1

    if depth != 0:
        msg = f"Unbalanced '{{' in URI pattern {uri!r}."
        raise ConfigurationError(msg)
    if literal_start < len(uri):
        tokens.append(PatternToken(uri[literal_start:]))
    return tokens


def _placeholder(uri: str, raw: str, seen: set[str]) -> PatternToken:
    name, sep, regex = raw[1:-1].partition(":")
    if not name.isidentifier():
        msg = f"Invalid parameter name {name!r} in URI pattern {uri!r}."
        raise ConfigurationError(msg)
    if name in seen:
        msg = f"Parameter {name!r} is used more than once in URI pattern {uri!r}."
        raise ConfigurationError(msg)
    if sep and not regex:
        msg = f"Empty regex for parameter {name!r} in URI pattern {uri!r}."
        raise ConfigurationError(msg)
    seen.add(name)
    return PatternToken(
        value=raw,
        is_param=True,
        param_name=name,
        param_regex=regex or DEFAULT_PARAM_REGEX,
    )


def compile_pattern(uri: str, *, ends: bool) -> re.Pattern[str]:
    """Compile *uri* into a start-anchored regex with named groups.

    With ``ends=True`` (routes) the regex must consume the whole path;
    a pattern ending in a placeholder also accepts one trailing slash.
    With ``ends=False`` (router prefixes) only the start is anchored.
    """
    key = (uri, ends)
    cached = _regex_cache.get(key)
    if cached is not None:
        return cached

    with _cache_lock:
        cached = _regex_cache.get(key)
        if cached is None:
            cached = _compile(uri, ends)
            _regex_cache[key] = cached
    return cached


def _compile(uri: str, ends: bool) -> re.Pattern[str]:
    tokens = parse_pattern(uri)
    parts = ["^"]
    for token in tokens:
        if token.is_param:
            parts.append(f"(?P<{token.param_name}>{token.param_regex})")
        else:
            parts.append(re.escape(token.value))
    if ends:
        if tokens and tokens[-1].is_param:
            parts.append("/?")
        parts.append("$")

    pattern = "".join(parts)
    try:
        return re.compile(pattern)
    except re.error as exc:
        msg = f"Invalid regex in URI pattern {uri!r}: {exc}"
        raise ConfigurationError(msg) from exc


def clear_regex_cache() -> None:
    """Drop every memoized pattern. Intended for test teardown."""
    with _cache_lock:
        _regex_cache.clear()


def regex_cache_size() -> int:
    return len(_regex_cache)


def substitute(uri: str, params: dict[str, str]) -> str:
    """Replace every placeholder in *uri* with the matching value from *params*.

    Raises ``ConfigurationError`` if a parameter is missing or a value
    does not satisfy its placeholder regex.
    """
    out: list[str] = []
    for token in parse_pattern(uri):
        if not token.is_param:
            out.append(token.value)
            continue
        assert token.param_name is not None
        if token.param_name not in params:
            msg = f"Missing parameter {token.param_name!r} to build URI {uri!r}."
            raise ConfigurationError(msg)
        value = str(params[token.param_name])
        if not re.fullmatch(token.param_regex, value):
            msg = (
                f"Value {value!r} for parameter {token.param_name!r} does not match "
                f"{token.param_regex!r} in URI {uri!r}."
            )
            raise ConfigurationError(msg)
        out.append(value)
    return "".join(out)
