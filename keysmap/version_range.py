import re

# Порядок квалификаторов как в Maven: alpha < beta < milestone < rc < snapshot < release < sp
QUALIFIERS = ["alpha", "beta", "milestone", "rc", "snapshot", "", "sp"]
QUALIFIER_ALIASES = {"ga": "", "final": "", "release": "", "cr": "rc"}
LETTER_ALIASES = {"a": "alpha", "b": "beta", "m": "milestone"}
RELEASE_RANK = QUALIFIERS.index("")

TOKEN_PATTERN = re.compile(r"\d+|[a-z]+")
RANGE_PATTERN = re.compile(r"\s*([\[(])([^\])]*)([\])])\s*(?:,|$)")


def parse_version(version):
    """
    Parses a Maven version string into a tuple of comparable items.
    Numbers become ints, everything else a qualifier string; trailing zeros and
    release qualifiers are dropped so that 1.0, 1 and 1.0-final are equal.
    """
    tokens = TOKEN_PATTERN.findall(version.strip().lower())
    items = []
    for i, token in enumerate(tokens):
        if token.isdigit():
            items.append(int(token))
            continue
        next_is_number = i + 1 < len(tokens) and tokens[i + 1].isdigit()
        if next_is_number and token in LETTER_ALIASES:
            token = LETTER_ALIASES[token]
        items.append(QUALIFIER_ALIASES.get(token, token))

    while items and items[-1] in (0, ""):
        items.pop()
    return tuple(items)


def _qualifier_key(qualifier):
    if qualifier in QUALIFIERS:
        return QUALIFIERS.index(qualifier), ""
    return len(QUALIFIERS), qualifier


def _compare_items(item1, item2):
    # None stands for a missing item
    if item1 is None and item2 is None:
        return 0
    if item1 is None:
        return -_compare_items(item2, None)
    if isinstance(item1, int):
        if item2 is None:
            return (item1 > 0) - (item1 < 0)
        if isinstance(item2, int):
            return (item1 > item2) - (item1 < item2)
        return 1
    if item2 is None:
        key1, key2 = _qualifier_key(item1), (RELEASE_RANK, "")
    elif isinstance(item2, int):
        return -1
    else:
        key1, key2 = _qualifier_key(item1), _qualifier_key(item2)
    return (key1 > key2) - (key1 < key2)


def compare_versions(v1, v2):
    """
    Compares two version strings.
    Returns a negative number, zero or a positive number like cmp.
    """
    items1, items2 = parse_version(v1), parse_version(v2)
    for i in range(max(len(items1), len(items2))):
        item1 = items1[i] if i < len(items1) else None
        item2 = items2[i] if i < len(items2) else None
        result = _compare_items(item1, item2)
        if result:
            return result
    return 0


class Restriction:
    """
    One interval of a version range; a bound of None is unbounded.
    """

    def __init__(self, lower=None, lower_inclusive=False, upper=None, upper_inclusive=False):
        self.lower = lower
        self.lower_inclusive = lower_inclusive
        self.upper = upper
        self.upper_inclusive = upper_inclusive

    def contains(self, version):
        if self.lower is not None:
            result = compare_versions(version, self.lower)
            if result < 0 or (result == 0 and not self.lower_inclusive):
                return False
        if self.upper is not None:
            result = compare_versions(version, self.upper)
            if result > 0 or (result == 0 and not self.upper_inclusive):
                return False
        return True

    def __repr__(self):
        lower = "[" if self.lower_inclusive else "("
        upper = "]" if self.upper_inclusive else ")"
        return f"{lower}{self.lower or ''},{self.upper or ''}{upper}"


class VersionRange:
    """
    A Maven version requirement: an exact version, "*" for any version, or one or
    more bracketed ranges like [1.1,2.0) or (,1.0],[1.2,).
    """

    def __init__(self, restrictions, version_spec):
        self.restrictions = restrictions
        self.version_spec = version_spec

    @classmethod
    def parse(cls, version_spec):
        version_spec = version_spec.strip()
        if not version_spec or version_spec == "*":
            return cls([Restriction()], version_spec)
        if version_spec[0] not in "[(":
            return cls([Restriction(version_spec, True, version_spec, True)], version_spec)

        restrictions = []
        position = 0
        while position < len(version_spec):
            match = RANGE_PATTERN.match(version_spec, position)
            if match is None:
                raise ValueError(f"Invalid version range: {version_spec}")
            restrictions.append(_parse_restriction(match.group(1), match.group(2), match.group(3), version_spec))
            position = match.end()
        return cls(restrictions, version_spec)

    def contains(self, version):
        return any(restriction.contains(version) for restriction in self.restrictions)

    def __repr__(self):
        return f"VersionRange({self.version_spec!r})"


def _parse_restriction(open_bracket, body, close_bracket, version_spec):
    lower_inclusive = open_bracket == "["
    upper_inclusive = close_bracket == "]"
    bounds = [bound.strip() for bound in body.split(",")]

    if len(bounds) == 1:
        if not (lower_inclusive and upper_inclusive) or not bounds[0]:
            raise ValueError(f"Single version must be surrounded by []: {version_spec}")
        return Restriction(bounds[0], True, bounds[0], True)
    if len(bounds) != 2:
        raise ValueError(f"Invalid version range: {version_spec}")

    lower = bounds[0] or None
    upper = bounds[1] or None
    if lower is not None and upper is not None and compare_versions(lower, upper) > 0:
        raise ValueError(f"Range defies version ordering: {version_spec}")
    return Restriction(lower, lower_inclusive, upper, upper_inclusive)
