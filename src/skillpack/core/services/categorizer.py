from __future__ import annotations

"""
File Categorization Service.

Assigns every traced file except the root document to one bucket of the
flat layout. Rules live in an ordered policy table evaluated top to
bottom; the first matching predicate wins, so the executable bit
dominates any content-based verdict.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from skillpack.domain.constants import BINARY_ENCODING, Category
from skillpack.domain.pack_models import TraceResult
from skillpack.infra.classifier import ContentClassifier, get_classifier
from skillpack.infra.fs import is_executable

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CLASSIFICATION POLICY
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileFacts:
    """Observations about one file that the policy predicates inspect."""
    path: str
    executable: bool
    encoding: str


CategoryRule = Tuple[str, Callable[[FileFacts], bool], Category]

CATEGORY_POLICY: Tuple[CategoryRule, ...] = (
    ("executable", lambda facts: facts.executable, Category.SCRIPT),
    ("binary", lambda facts: facts.encoding == BINARY_ENCODING, Category.ASSET),
)

DEFAULT_CATEGORY = Category.REFERENCE


def classify_facts(facts: FileFacts, policy: Tuple[CategoryRule, ...] = CATEGORY_POLICY) -> Category:
    """Evaluate the policy table for one file."""
    for rule_name, predicate, category in policy:
        if predicate(facts):
            logger.debug(f"{facts.path}: rule '{rule_name}' -> {category.value}")
            return category
    return DEFAULT_CATEGORY

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def categorize_files(
        files: Iterable[str],
        root_path: str,
        classifier: Optional[ContentClassifier] = None,
) -> Dict[str, Category]:
    """
    Categorize a set of traced files.

    The content classifier is queried once for the whole batch.

    Args:
        files: Absolute paths of traced files.
        root_path: Absolute path of the root document (always excluded).
        classifier: Encoding classifier; the configured default if None.

    Returns:
        Dict[str, Category]: Exactly one category per non-root file.
    """
    to_check = sorted(f for f in files if f != root_path)
    if not to_check:
        return {}

    classifier = classifier or get_classifier()
    encodings = classifier.classify(to_check)

    categories: Dict[str, Category] = {}
    for path in to_check:
        facts = FileFacts(
            path=path,
            executable=is_executable(path),
            encoding=encodings.get(path, ""),
        )
        categories[path] = classify_facts(facts)
    return categories


def categorize(trace: TraceResult, classifier: Optional[ContentClassifier] = None) -> TraceResult:
    """Fill the category map of a trace in place and return it."""
    trace.categories = categorize_files(trace.files, trace.root_path, classifier)

    counts: Dict[str, int] = {}
    for category in trace.categories.values():
        counts[category.value] = counts.get(category.value, 0) + 1
    logger.debug(f"Categorized {len(trace.categories)} file(s): {counts}")
    return trace
