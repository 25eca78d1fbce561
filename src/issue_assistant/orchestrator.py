"""Issue assistant orchestrator connecting harvesting, analysis and posting.

Receives a parsed issue event and runs each enabled capability:

- comment: harvest files → analyze the issue body → post the answer
- label: list repository labels → suggest labels → keep those at or
  above the confidence threshold → apply them → post the rationale

Events whose action is not "opened" are skipped before any capability
runs. Each capability is isolated: its failure is logged and reported in
the result, and never prevents a sibling capability from running.

Depends on:
- src/issue_assistant/webhook/models.py (IssueEvent)
- src/issue_assistant/harvest/harvester.py (RepositoryHarvester)
- src/issue_assistant/ai/analyzer.py (IssueAnalyzer)
- src/issue_assistant/github/client.py (GitHubClient)
- src/issue_assistant/formatting.py (comment formatting, label selection)
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from src.issue_assistant.ai.analyzer import IssueAnalyzer
from src.issue_assistant.capabilities import Capability
from src.issue_assistant.formatting import (
    DEFAULT_LABEL_THRESHOLD,
    format_analysis_comment,
    format_label_comment,
    select_labels,
)
from src.issue_assistant.github.client import GitHubClient
from src.issue_assistant.harvest.harvester import RepositoryHarvester
from src.issue_assistant.webhook.models import IssueEvent


class CapabilityStatus(str, Enum):
    """Outcome of running one capability.

    Attributes:
        COMPLETED: The capability posted its result.
        SKIPPED: There was nothing to do (no labels defined, or no label
            met the confidence threshold).
        FAILED: A harvest, query, parse or posting step failed.
    """

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class IssueAssistant:
    """Drives an issue event through the enabled capabilities.

    Attributes:
        github_client: GitHub API client for comments and labels.
        harvester: Collects repository files for code analysis.
        analyzer: LLM-based analysis of issues.
        capabilities: Capabilities to run, in order.
        label_threshold: Minimum confidence for applying a label.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        harvester: RepositoryHarvester,
        analyzer: IssueAnalyzer,
        capabilities: Sequence[Capability],
        label_threshold: float = DEFAULT_LABEL_THRESHOLD,
        logger: Optional[logging.Logger] = None,
    ):
        if not capabilities:
            raise ValueError("at least one capability must be enabled")

        self.github_client = github_client
        self.harvester = harvester
        self.analyzer = analyzer
        self.capabilities = tuple(dict.fromkeys(capabilities))
        self.label_threshold = label_threshold
        self.logger = logger or logging.getLogger(__name__)

    async def process_event(
        self, event: IssueEvent
    ) -> dict[Capability, CapabilityStatus]:
        """Run every enabled capability for an issue event.

        Args:
            event: Parsed issue event.

        Returns:
            Status per capability that ran. Empty when the event is not a
            newly opened issue.
        """
        if not event.is_opened:
            self.logger.info(
                "Event is not a new issue, skipping",
                extra={"issue_id": event.issue_id, "action": event.action},
            )
            return {}

        self.logger.info(
            "Processing issue",
            extra={
                "issue_id": event.issue_id,
                "capabilities": [c.value for c in self.capabilities],
            },
        )

        results: dict[Capability, CapabilityStatus] = {}
        for capability in self.capabilities:
            results[capability] = await self._run_capability(capability, event)

        self.logger.info(
            "Issue processing completed",
            extra={
                "issue_id": event.issue_id,
                "results": {c.value: s.value for c, s in results.items()},
            },
        )
        return results

    async def _run_capability(
        self,
        capability: Capability,
        event: IssueEvent,
    ) -> CapabilityStatus:
        try:
            if capability == Capability.COMMENT:
                return await self._run_comment(event)
            return await self._run_label(event)
        except Exception as exc:
            self.logger.exception(
                "Capability failed",
                extra={
                    "issue_id": event.issue_id,
                    "capability": capability.value,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return CapabilityStatus.FAILED

    async def _run_comment(self, event: IssueEvent) -> CapabilityStatus:
        """Harvest files, analyze the issue body and post the answer."""
        files = await self.harvester.harvest(event.owner, event.repository)

        analysis = await self.analyzer.analyze_code(event.body, files)

        await self.github_client.create_comment(
            event.owner,
            event.repository,
            event.issue_number,
            format_analysis_comment(analysis.answer),
        )

        self.logger.info(
            "Analysis comment posted",
            extra={
                "issue_id": event.issue_id,
                "confidence": analysis.confidence,
                "files_count": len(files),
            },
        )
        return CapabilityStatus.COMPLETED

    async def _run_label(self, event: IssueEvent) -> CapabilityStatus:
        """Suggest labels, apply the confident ones and explain them."""
        available = await self.github_client.list_labels(
            event.owner, event.repository
        )
        if not available:
            self.logger.info(
                "Repository has no labels, skipping label suggestion",
                extra={"issue_id": event.issue_id},
            )
            return CapabilityStatus.SKIPPED

        analysis = await self.analyzer.analyze_labels(
            event.title, event.body, available
        )

        # Adding an undefined label would create it on the repository.
        known_names = {label.name for label in available}
        unknown = sorted(set(analysis.suggested_labels) - known_names)
        if unknown:
            self.logger.warning(
                "Ignoring suggested labels not defined on the repository",
                extra={"issue_id": event.issue_id, "unknown_labels": unknown},
            )
        suggested = {
            name: confidence
            for name, confidence in analysis.suggested_labels.items()
            if name in known_names
        }

        selected = select_labels(suggested, self.label_threshold)
        if not selected:
            self.logger.info(
                "No label met the confidence threshold",
                extra={
                    "issue_id": event.issue_id,
                    "threshold": self.label_threshold,
                    "suggested_labels": analysis.suggested_labels,
                },
            )
            return CapabilityStatus.SKIPPED

        await self.github_client.add_labels(
            event.owner,
            event.repository,
            event.issue_number,
            selected,
        )

        await self.github_client.create_comment(
            event.owner,
            event.repository,
            event.issue_number,
            format_label_comment(
                selected, analysis.explanation, analysis.suggested_labels
            ),
        )

        self.logger.info(
            "Labels applied",
            extra={"issue_id": event.issue_id, "labels": selected},
        )
        return CapabilityStatus.COMPLETED
