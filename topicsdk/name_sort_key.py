"""Sort key used for every alphabetized listing."""


def _char_rank(ch: str) -> tuple[int, str]:
    if ch.isalpha():
        return (2, ch)
    if ch.isdigit():
        return (1, ch)
    return (0, ch)


def name_sort_key(name: str) -> tuple[tuple[tuple[int, str], ...], str]:
    """Order names case-insensitively, breaking ties by the original case.

    Punctuation such as ``_`` sorts before digits, and digits before letters.
    """
    return (tuple(_char_rank(ch) for ch in name.casefold()), name)
