"""Topic Classification — first-match keyword lookup over a fixed lexicon.

Invariants:
    - Returns exactly one Topic; GENERAL when no keyword matches
    - First topic in TOPIC_KEYWORDS declaration order wins ties
    - Keywords match as substrings of the lowercased text (not whole words)
    - Topic is computed once at claim creation and never recomputed on read
"""

from claimgraph.core.domain_types import Topic

# Declaration order is the tie-break order.
TOPIC_KEYWORDS: tuple[tuple[Topic, tuple[str, ...]], ...] = (
    (Topic.POLITICS, (
        "government", "president", "congress", "election", "vote",
        "policy", "law",
    )),
    (Topic.ECONOMY, (
        "economy", "money", "market", "trade", "business", "finance", "tax",
    )),
    (Topic.TECHNOLOGY, (
        "technology", "ai", "computer", "internet", "software", "digital",
    )),
    (Topic.ENVIRONMENT, (
        "climate", "environment", "pollution", "green", "energy", "carbon",
    )),
    (Topic.HEALTH, (
        "health", "medical", "doctor", "disease", "treatment", "medicine",
    )),
    (Topic.EDUCATION, (
        "education", "school", "student", "teacher", "learning", "university",
    )),
    (Topic.ETHICS, (
        "ethics", "moral", "right", "wrong", "should", "ought", "justice",
    )),
)


def classify_topic(text: str) -> Topic:
    """Return the first topic whose keyword appears in the text."""
    lowered = text.lower()
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return Topic.GENERAL
