# ABOUTME: Unicode code-point classification for CJK text.
# ABOUTME: Decides when a soft line break between two characters should vanish.

# Inclusive code-point ranges treated as CJK. U+25CB (WHITE CIRCLE) is used
# as a zero in Chinese numerals; the full-width Latin letters appear inline
# in Chinese prose.
CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x25CB, 0x25CB),
    (0x3400, 0x9FFF),
    (0xF900, 0xFAFF),
    (0xFF21, 0xFF3A),
    (0xFF41, 0xFF5A),
)

CHINESE_LANGUAGE_TAGS: frozenset[str] = frozenset({"cn", "zh"})


def is_cjk(char: str) -> bool:
    """Whether a single character falls in one of the CJK ranges."""
    if len(char) != 1:
        return False
    code_point = ord(char)
    return any(low <= code_point <= high for low, high in CJK_RANGES)


def is_chinese(language: str | None) -> bool:
    """Whether a language tag selects the Chinese soft-break policy.

    Matches "CN", "zh" and any "zh-*" subtag, case-insensitively.
    """
    if not language:
        return False
    tag = language.strip().lower()
    return tag in CHINESE_LANGUAGE_TAGS or tag.startswith("zh-")


def joins_without_break(before: str, after: str) -> bool:
    """Whether a soft break between two text runs should render as nothing.

    Only the last character of `before` and the first character of `after`
    are inspected.
    """
    return bool(before) and bool(after) and is_cjk(before[-1]) and is_cjk(after[0])
