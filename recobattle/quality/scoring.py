"""Transcript normalization and positional word-match similarity.

Both texts are normalized independently: every character that is neither
a letter nor whitespace is dropped and the rest is lower-cased. The score
is the share of aligned positions holding the same word over the shorter
of the two word sequences. An inserted or dropped word shifts the
alignment for the rest of the sequence.
"""


def normalize_text(text: str) -> str:
    """Drop non-letter, non-whitespace characters and lower-case the rest."""
    return "".join(ch for ch in text if ch.isalpha() or ch.isspace()).lower()


def tokenize(text: str) -> list[str]:
    """Split text into words on any run of whitespace."""
    return text.split()


def compare_texts(ideal: str, candidate: str) -> float:
    """Positional word-match similarity of two already normalized texts.

    Args:
        ideal: Normalized reference text.
        candidate: Normalized machine transcript.

    Returns:
        matches / min(len(ideal_words), len(candidate_words)), or 0.0 when
        either text has no words.
    """
    ideal_words = tokenize(ideal)
    candidate_words = tokenize(candidate)

    min_length = min(len(ideal_words), len(candidate_words))
    if min_length == 0:
        return 0.0

    matches = sum(
        1 for i in range(min_length) if ideal_words[i] == candidate_words[i]
    )
    return matches / min_length


def score_transcript(ideal: str, candidate: str) -> float:
    """Normalize both texts and compare them."""
    return compare_texts(normalize_text(ideal), normalize_text(candidate))
