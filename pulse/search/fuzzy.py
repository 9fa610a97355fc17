"""
Fuzzy matching - Case-insensitive subsequence test.

Used as an inclusion gate only; how good a match is gets decided by the
ranker.
"""


def fuzzy_match(text: str, query: str) -> bool:
    """
    Return True if every character of `query` appears in `text` in order.

    Characters need not be contiguous. An empty query always matches.
    Single pass over `text` with one pointer into `query`.
    """
    if not query:
        return True

    needle = query.lower()
    pos = 0
    for char in text.lower():
        if char == needle[pos]:
            pos += 1
            if pos == len(needle):
                return True
    return False
