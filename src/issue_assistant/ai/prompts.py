"""Prompt construction for code and label analysis.

This module renders the system and user instructions sent to the model.
Each prompt states the exact output contract the response parser expects:
- Structured mode: a single JSON object with `answer`, `confidence` and
  an optional `relevant_files` list
- Trailing-metadata mode: a markdown answer followed by a final JSON
  object with `confidence` and an optional `relevant_files` list
- Label suggestions: a single JSON object with `suggestedLabels` and
  `explanation`

The confidence rubric is guidance for the model; it is not enforced.

Depends on:
- src/issue_assistant/ai/models.py (ModelRequest, ParsingMode)
- src/issue_assistant/harvest/models.py (HarvestedFile)
"""

from typing import Sequence

from src.issue_assistant.ai.models import ModelRequest, ParsingMode
from src.issue_assistant.github.models import RepositoryLabel
from src.issue_assistant.harvest.models import HarvestedFile


CODE_ANALYSIS_SYSTEM_PROMPT = """You are a specialized AI code assistant with expertise in analyzing codebases and providing technical explanations.

Your core responsibilities:
1. Analyze code thoroughly and provide accurate, well-structured explanations
2. Focus on practical, implementation-focused responses
3. Always include relevant code examples and file references
4. Maintain a professional and educational tone
5. Ensure responses are complete and well-organized

When analyzing code:
- Start with a high-level overview
- Break down complex concepts into clear sections
- Reference specific files and code sections
- Include practical use cases"""

STRUCTURED_SYSTEM_RULE = """Respond with a single valid JSON object only, following the structure given in the request. Never wrap it in markdown code blocks."""

TRAILING_METADATA_SYSTEM_RULE = """Answer in markdown and always end the response with a single JSON metadata object, following the structure given in the request."""

CONFIDENCE_RUBRIC = """Confidence Score Guide:
- 0.0-0.3: Limited context or understanding
- 0.4-0.6: Partial context, moderate understanding
- 0.7-0.9: Good context, clear understanding
- 1.0: Complete context, full understanding"""

STRUCTURED_OUTPUT_CONTRACT = """You MUST respond with a single valid JSON object only. Do not wrap the response in markdown code blocks and do not include any text before or after the JSON object.

Respond with this exact JSON structure:
{
  "answer": "Your detailed explanation. Markdown is allowed; escape newlines as \\n.",
  "confidence": 0.8,
  "relevant_files": ["path/to/file.ext"]
}

- "answer" (string, required): the full answer to the question.
- "confidence" (number between 0.0 and 1.0, required).
- "relevant_files" (list of strings, optional): repository paths you relied on."""

TRAILING_METADATA_OUTPUT_CONTRACT = """Write your answer as markdown. After the answer, end the response with a single JSON object on its own line and nothing after it:
{"confidence": 0.8, "relevant_files": ["path/to/file.ext"]}

- "confidence" (number between 0.0 and 1.0, required).
- "relevant_files" (list of strings, optional): repository paths you relied on.
Do not use the "{" character anywhere after that final JSON object begins."""

LABEL_ANALYSIS_SYSTEM_PROMPT = """You are an expert GitHub issue triager. Your task is to suggest which of the repository's existing labels apply to an issue.

You MUST respond with a single valid JSON object only. Do not wrap the response in markdown code blocks and do not include any text before or after the JSON object.

Only suggest labels from the provided list. Respond with this exact JSON structure:
{
  "suggestedLabels": {"label-name": 0.9, "other-label": 0.4},
  "explanation": "Brief explanation of why these labels apply"
}

- "suggestedLabels" (object, required): label name mapped to a confidence between 0.0 and 1.0.
- "explanation" (string, required): your rationale."""


def format_files_for_prompt(files: Sequence[HarvestedFile]) -> str:
    """Render harvested files as prompt blocks, in harvest order.

    Args:
        files: Harvested files to embed.

    Returns:
        One "File:/Content:" block per file, concatenated.
    """
    return "".join(
        f"File: {file.path}\nContent:\n{file.content}\n\n" for file in files
    )


def format_labels_for_prompt(labels: Sequence[RepositoryLabel]) -> str:
    """Render repository labels as a bullet list with descriptions."""
    lines = []
    for label in labels:
        if label.description:
            lines.append(f"- {label.name}: {label.description}")
        else:
            lines.append(f"- {label.name}")
    return "\n".join(lines)


class PromptBuilder:
    """Builds model requests for the active parsing mode.

    Attributes:
        mode: Output convention requested from the model for code
            analysis. Label prompts are always structured.
    """

    def __init__(self, mode: ParsingMode = ParsingMode.STRUCTURED):
        self.mode = mode

    def build(
        self,
        question: str,
        files: Sequence[HarvestedFile],
    ) -> ModelRequest:
        """Build a code-analysis request.

        Args:
            question: The user's question, typically the issue body.
            files: Harvested files, embedded in harvest order.

        Returns:
            The request carrying the system and user instructions.
        """
        if self.mode == ParsingMode.TRAILING_METADATA:
            output_contract = TRAILING_METADATA_OUTPUT_CONTRACT
            system_rule = TRAILING_METADATA_SYSTEM_RULE
        else:
            output_contract = STRUCTURED_OUTPUT_CONTRACT
            system_rule = STRUCTURED_SYSTEM_RULE

        question_text = question.strip() if question else "(no question provided)"

        user_prompt = (
            "Analyze the codebase and answer the question below.\n\n"
            f"{output_contract}\n\n"
            f"{CONFIDENCE_RUBRIC}\n\n"
            "Available Files:\n"
            f"{format_files_for_prompt(files)}\n"
            "Question:\n"
            f"{question_text}"
        )

        return ModelRequest(
            system_instruction=f"{CODE_ANALYSIS_SYSTEM_PROMPT}\n\n{system_rule}",
            user_instruction=user_prompt,
        )

    def build_label_request(
        self,
        title: str,
        body: str,
        labels: Sequence[RepositoryLabel],
    ) -> ModelRequest:
        """Build a label-suggestion request.

        Args:
            title: The issue title.
            body: The issue body.
            labels: Labels defined on the repository.

        Returns:
            The request carrying the system and user instructions.
        """
        body_content = body if body else "(no description provided)"

        user_prompt = f"""Suggest labels for this GitHub issue.

**Title:** {title}

**Description:**
{body_content}

**Available Labels:**
{format_labels_for_prompt(labels)}

{CONFIDENCE_RUBRIC}

Provide your suggestions as JSON."""

        return ModelRequest(
            system_instruction=LABEL_ANALYSIS_SYSTEM_PROMPT,
            user_instruction=user_prompt,
        )
