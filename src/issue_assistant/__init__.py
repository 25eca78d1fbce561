"""Issue assistant for answering newly opened GitHub issues.

This package implements a CI-triggered bot that:
- Parses the triggering GitHub issue event
- Harvests a filtered snapshot of the repository source tree
- Asks an LLM to answer the issue against that snapshot
- Suggests and applies repository labels with a confidence threshold
- Posts the results back to the issue as comments and labels
"""
