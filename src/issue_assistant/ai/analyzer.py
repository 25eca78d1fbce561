"""Issue analysis combining prompt building, querying and parsing.

The IssueAnalyzer is the single entry point the orchestrator uses for
model work. It builds the request for the active parsing mode, hands the
matching shape check to the gateway so malformed output is retried, and
parses the accepted text into a typed result.

Depends on:
- src/issue_assistant/ai/prompts.py (PromptBuilder)
- src/issue_assistant/ai/gateway.py (ModelGateway)
- src/issue_assistant/ai/parser.py (ResponseParser)
"""

import logging
from typing import Optional, Sequence

from src.issue_assistant.ai.gateway import ModelGateway
from src.issue_assistant.ai.models import CodeAnalysis, LabelAnalysis, ParsingMode
from src.issue_assistant.ai.parser import ResponseParser
from src.issue_assistant.ai.prompts import PromptBuilder
from src.issue_assistant.github.models import RepositoryLabel
from src.issue_assistant.harvest.models import HarvestedFile


class IssueAnalyzer:
    """Answers issues and suggests labels using a model gateway.

    Attributes:
        gateway: Gateway used for every model call.
        prompt_builder: Renders requests for the active parsing mode.
        parser: Parses responses for the active parsing mode.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        prompt_builder: Optional[PromptBuilder] = None,
        parser: Optional[ResponseParser] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.gateway = gateway
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.parser = parser or ResponseParser(self.prompt_builder.mode)
        self.logger = logger or logging.getLogger(__name__)

        if self.parser.mode != self.prompt_builder.mode:
            raise ValueError(
                "Prompt builder and parser must use the same parsing mode "
                f"({self.prompt_builder.mode.value} != {self.parser.mode.value})"
            )

    @property
    def mode(self) -> ParsingMode:
        return self.parser.mode

    async def analyze_code(
        self,
        question: str,
        files: Sequence[HarvestedFile],
    ) -> CodeAnalysis:
        """Answer a question about the harvested repository files.

        Args:
            question: The user's question, typically the issue body.
            files: Harvested files to ground the answer in.

        Returns:
            CodeAnalysis with the answer and its confidence.

        Raises:
            ModelGatewayError: If the model never returns valid output.
            ResponseParseError: If the accepted output lacks required fields.
        """
        self.logger.info(
            "Analyzing issue",
            extra={
                "question_length": len(question) if question else 0,
                "files_count": len(files),
                "parsing_mode": self.mode.value,
            },
        )

        request = self.prompt_builder.build(question, files)
        raw_text = await self.gateway.query(request, validator=self.parser.validate)
        analysis = self.parser.parse_code_analysis(raw_text)

        self.logger.info(
            "Issue analyzed",
            extra={
                "confidence": analysis.confidence,
                "relevant_files": analysis.relevant_files,
            },
        )
        return analysis

    async def analyze_labels(
        self,
        title: str,
        body: str,
        labels: Sequence[RepositoryLabel],
    ) -> LabelAnalysis:
        """Suggest repository labels for an issue.

        Args:
            title: The issue title.
            body: The issue body.
            labels: Labels defined on the repository.

        Returns:
            LabelAnalysis with per-label confidences and an explanation.

        Raises:
            ModelGatewayError: If the model never returns valid output.
            ResponseParseError: If the accepted output lacks required fields.
        """
        self.logger.info(
            "Suggesting labels",
            extra={"title": title[:100], "available_labels": len(labels)},
        )

        request = self.prompt_builder.build_label_request(title, body, labels)
        raw_text = await self.gateway.query(
            request, validator=self.parser.validate_labels
        )
        analysis = self.parser.parse_label_analysis(raw_text)

        self.logger.info(
            "Labels suggested",
            extra={"suggested_labels": analysis.suggested_labels},
        )
        return analysis
