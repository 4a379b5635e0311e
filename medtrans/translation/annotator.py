"""
Dictionary annotation of raw page text.

Each token found in the terminology store is rewritten as
``token [MED:translation]`` (domain table) or ``token [NORM:translation]``
(general table) so that later stages can either consume or collapse the hint.
"""

from __future__ import annotations
from typing import List
import logging
import re

from medtrans.core.models import AnnotatedToken, MarkerKind
from medtrans.terminology.store import TerminologyStore

logger = logging.getLogger(__name__)

# Terminal punctuation runs that end a sentence; "37.5" and "120/80" stay whole.
SENTENCE_BOUNDARY = re.compile(r"[.!?]+(?=\s|$)")
SENTENCE_SEPARATOR = ". "


def split_sentences(text: str) -> List[str]:
    """Split text on terminal punctuation, dropping empty sentences."""
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


class Annotator:
    """Pure, stateless annotation over a read-only terminology store."""

    def __init__(self, store: TerminologyStore):
        self.store = store

    def annotate_token(self, token: str) -> AnnotatedToken:
        match = self.store.lookup_prioritized(token)
        if match is None:
            return AnnotatedToken(token)
        return AnnotatedToken(token, match.marker_kind, match.translation)

    def annotate_tokens(self, sentence: str) -> List[AnnotatedToken]:
        """Annotate each whitespace-delimited token of one sentence."""
        return [self.annotate_token(token) for token in sentence.split()]

    def annotate(self, text: str) -> str:
        """
        Annotate a page of text.

        Args:
            text: Raw page text, possibly several sentences

        Returns:
            Sentences with inline markers, rejoined with ". "
        """
        sentences = []
        marked = 0
        for sentence in split_sentences(text):
            tokens = self.annotate_tokens(sentence)
            marked += sum(1 for t in tokens if t.kind is not MarkerKind.NONE)
            sentences.append(" ".join(t.render() for t in tokens))

        logger.debug(f"Annotated {len(sentences)} sentences, {marked} tokens marked")
        return SENTENCE_SEPARATOR.join(sentences)
