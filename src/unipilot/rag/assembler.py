"""Context assembler: ranked documents → one bounded prompt context string.

Per document, in score order:
  === {display_name} ({source_name}) ===
  <LABEL>:\\n<section excerpt>     for each topic the query mentions with a non-empty section
  GENERAL INFO:\\n<content[:N]>...

Blocks are joined and the result is cut at ``budget`` characters, even
mid-document. Lower-ranked documents are the ones that lose text.
"""

from __future__ import annotations

from dataclasses import dataclass

from unipilot.rag.scorer import ScoredDocument
from unipilot.rag.topics import CONTEXT_LABELS, SECTION_FOR_TOPIC, Topic, classify_query

# Section blocks are emitted in this order regardless of how the query is phrased.
_TOPIC_ORDER: tuple[Topic, ...] = (
    Topic.FEES,
    Topic.ADMISSIONS,
    Topic.PROGRAMS,
    Topic.ACCOMMODATION,
)


@dataclass
class AssemblerConfig:
    budget: int = 8_000
    general_info_chars: int = 500


def assemble(
    scored_documents: list[ScoredDocument],
    query: str,
    config: AssemblerConfig | None = None,
) -> str:
    """Build the context block for *query*; never longer than ``config.budget``."""
    config = config or AssemblerConfig()
    topics = classify_query(query)

    blocks: list[str] = []
    for sd in scored_documents:
        doc = sd.document
        lines = [f"=== {doc.display_name} ({doc.source_name}) ==="]
        for topic in _TOPIC_ORDER:
            if topic not in topics:
                continue
            excerpt = doc.sections.get(SECTION_FOR_TOPIC[topic], "")
            if excerpt:
                lines.append(f"{CONTEXT_LABELS[topic]}:\n{excerpt}")
        lines.append(f"GENERAL INFO:\n{doc.content[: config.general_info_chars]}...")
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks)[: max(0, config.budget)]
