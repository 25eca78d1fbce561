"""Comment formatting and label selection for issue responses.

This module formats the analysis and label results as GitHub-flavored
markdown for posting as issue comments, and selects which suggested
labels are confident enough to apply.

Depends on:
- src/issue_assistant/ai/models.py (LabelAnalysis)
"""

from typing import Mapping, Sequence


DEFAULT_LABEL_THRESHOLD = 0.7

ANALYSIS_HEADER = "🤖 AI Assistant Analysis"

LABEL_HEADER = "🏷️ AI Assistant Labels"

ATTRIBUTION_FOOTER = """
---
_This analysis was performed by [Issue Analyzer](https://github.com/canack/issue-assistant). If you have any questions, please contact the repository maintainers._"""


def format_analysis_comment(answer: str) -> str:
    """Format a code analysis answer as an issue comment.

    Args:
        answer: Markdown answer text from the model.

    Returns:
        The answer between the analysis header and the attribution footer.
    """
    return f"{ANALYSIS_HEADER}\n\n{answer.strip()}\n{ATTRIBUTION_FOOTER}"


def select_labels(
    suggested_labels: Mapping[str, float],
    threshold: float = DEFAULT_LABEL_THRESHOLD,
) -> list[str]:
    """Select the labels whose confidence meets the threshold.

    The threshold is inclusive. Selected labels are ordered by descending
    confidence, then by name.

    Args:
        suggested_labels: Label name to confidence.
        threshold: Minimum confidence for a label to be applied.

    Returns:
        Label names to apply, possibly empty.
    """
    selected = [
        (name, confidence)
        for name, confidence in suggested_labels.items()
        if confidence >= threshold
    ]
    selected.sort(key=lambda item: (-item[1], item[0]))
    return [name for name, _ in selected]


def format_label_comment(
    labels: Sequence[str],
    explanation: str,
    confidences: Mapping[str, float],
) -> str:
    """Format the applied labels and the model's rationale as a comment.

    Args:
        labels: Labels that were applied.
        explanation: The model's rationale.
        confidences: Label name to confidence, for display.

    Returns:
        A markdown comment listing each label with its confidence.
    """
    label_lines = "\n".join(
        f"- `{name}` ({confidences.get(name, 0.0):.0%} confidence)"
        for name in labels
    )
    explanation_text = explanation.strip() or "_No explanation provided._"

    return (
        f"{LABEL_HEADER}\n\n"
        "The following labels were applied to this issue:\n\n"
        f"{label_lines}\n\n"
        "**Why:**\n"
        f"{explanation_text}\n"
        f"{ATTRIBUTION_FOOTER}"
    )
