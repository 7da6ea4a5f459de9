"""Accept-Language negotiation."""


def _parse(header: str) -> list[tuple[str, float]]:
    """Return ``(tag, q)`` pairs sorted by descending weight, stable on ties."""
    entries: list[tuple[str, float]] = []
    for part in header.split(","):
        tag, *params = (piece.strip() for piece in part.split(";"))
        if not tag:
            continue
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        if q > 0:
            entries.append((tag, q))
    entries.sort(key=lambda entry: entry[1], reverse=True)
    return entries


def detect_language(header: str | None, available: tuple[str, ...] | list[str], default: str) -> str:
    """Pick the best of *available* languages for an ``Accept-Language`` header.

    For each requested tag, by weight: an exact (case-insensitive) match
    wins, then an available language sharing the primary subtag
    (``en`` or ``en-GB`` both select ``en-US``). ``*`` selects *default*.
    Anything else falls back to *default*.
    """
    if not header:
        return default

    by_lower = {lang.lower(): lang for lang in available}
    for tag, _ in _parse(header):
        if tag == "*":
            return default
        exact = by_lower.get(tag.lower())
        if exact is not None:
            return exact
        primary = tag.split("-", 1)[0].lower()
        for lang in available:
            if lang.split("-", 1)[0].lower() == primary:
                return lang
    return default
