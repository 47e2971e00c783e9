import re
import typing


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    buf = []

    i = iter(items)
    try:
        x = next(i)
    except StopIteration:
        return ""
    buf.append(x)

    lx: typing.Optional[str] = None

    for x in i:
        if lx is not None:
            buf.append(", ")
            buf.append(lx)
        lx = x
    if lx is not None:
        buf.append(conj)
        buf.append(lx)
    return "".join(buf)


def demodulize(name: str) -> str:
    """
    Strips the dotted qualification from a name.

    >>> demodulize("api.v1.PostSerializer")
    'PostSerializer'
    """
    return name.rsplit(".", 1)[-1]


_UNDERSCORE_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_UNDERSCORE_WORD = re.compile(r"([a-z\d])([A-Z])")


def underscore(name: str) -> str:
    """
    >>> underscore("BlogPost")
    'blog_post'
    >>> underscore("HTMLPage")
    'html_page'
    """
    name = _UNDERSCORE_ACRONYM.sub(r"\1_\2", name)
    name = _UNDERSCORE_WORD.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


_UNCOUNTABLES = frozenset(
    [
        "data",
        "equipment",
        "fish",
        "information",
        "media",
        "metadata",
        "money",
        "news",
        "rice",
        "series",
        "sheep",
        "species",
    ]
)

_IRREGULARS = [
    ("person", "people"),
    ("man", "men"),
    ("woman", "women"),
    ("child", "children"),
    ("mouse", "mice"),
    ("ox", "oxen"),
]

_PLURAL_RULES = [
    (re.compile(r"(quiz)$"), r"\1zes"),
    (re.compile(r"(matr|vert|ind)(?:ix|ex)$"), r"\1ices"),
    (re.compile(r"(x|ch|ss|sh|z)$"), r"\1es"),
    (re.compile(r"([^aeiouy]|qu)y$"), r"\1ies"),
    (re.compile(r"(?:([^f])fe|([lr])f)$"), r"\1\2ves"),
    (re.compile(r"sis$"), "ses"),
    (re.compile(r"(bu|statu)s$"), r"\1ses"),
    (re.compile(r"(octop|vir)us$"), r"\1i"),
    (re.compile(r"s$"), "s"),
    (re.compile(r"$"), "s"),
]

_SINGULAR_RULES = [
    (re.compile(r"(quiz)zes$"), r"\1"),
    (re.compile(r"(matr)ices$"), r"\1ix"),
    (re.compile(r"(vert|ind)ices$"), r"\1ex"),
    (re.compile(r"(octop|vir)i$"), r"\1us"),
    (re.compile(r"(bu|statu)ses$"), r"\1s"),
    (re.compile(r"(x|ch|ss|sh|z)es$"), r"\1"),
    (re.compile(r"([^aeiouy]|qu)ies$"), r"\1y"),
    (re.compile(r"([lr])ves$"), r"\1f"),
    (re.compile(r"([^f])ves$"), r"\1fe"),
    (re.compile(r"(analy|ba|diagno|parenthe|progno|synop|the)ses$"), r"\1sis"),
    (re.compile(r"ss$"), "ss"),
    (re.compile(r"s$"), ""),
]


def _inflect(
    word: str,
    rules: typing.Sequence[typing.Tuple[typing.Pattern[str], str]],
    irregulars: typing.Mapping[str, str],
) -> str:
    head, sep, last = word.rpartition("_")
    lowered = last.lower()
    if not last or lowered in _UNCOUNTABLES:
        return word
    if lowered in irregulars:
        return head + sep + irregulars[lowered]
    for pattern, replacement in rules:
        if pattern.search(last):
            return head + sep + pattern.sub(replacement, last, count=1)
    return word


def pluralize(word: str) -> str:
    """
    >>> pluralize("comment")
    'comments'
    >>> pluralize("blog_category")
    'blog_categories'
    """
    return _inflect(word, _PLURAL_RULES, dict(_IRREGULARS))


def singularize(word: str) -> str:
    """
    >>> singularize("comments")
    'comment'
    >>> singularize("people")
    'person'
    """
    return _inflect(word, _SINGULAR_RULES, {p: s for s, p in _IRREGULARS})
