"""Tag-overlap relatedness ranking"""

from typing import Iterable, Sequence

from blogpub.core.models import Document


def relatedness(reference_tags: Iterable[str], candidate_tags: Iterable[str]) -> float:
    """shared / max(|reference|, |candidate|); 0.0 when either side has no tags."""
    ref, cand = set(reference_tags), set(candidate_tags)
    if not ref or not cand:
        return 0.0
    return len(ref & cand) / max(len(ref), len(cand))


def rank_related(
    reference_slug: str,
    reference_tags: Sequence[str],
    candidates: Iterable[Document],
    limit: int = 3,
    ) -> list[Document]:
    """Order candidates by tag overlap with the reference, best first.

    The reference itself and candidates sharing no tags are dropped. Ties keep
    enumeration order (sorted() is stable).
    """
    scored = [
        (relatedness(reference_tags, doc.tags), doc)
        for doc in candidates
        if doc.slug != reference_slug
    ]
    ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda pair: pair[0], reverse=True)
    return [doc for _, doc in ranked[:max(limit, 0)]]
