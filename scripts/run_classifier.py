#!/usr/bin/env python
"""Classify a file of events against a set of labels.

Usage:
    python -m scripts.run_classifier --events data/events.json \
        --labels sports politics technology --min-similarity 0.7

Credentials and connection options come from GIGACHAT_* environment
variables; classifier defaults come from CLASSIFIER_* variables and are
overridden by the command line.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from gigachat_agents.agents.models import Event
from gigachat_agents.agents.options import ClassifierOptions
from gigachat_agents.classifier.pipeline import EmbeddingClassifierAgent
from gigachat_agents.config import get_settings
from gigachat_agents.exceptions import ConfigurationError, ValidationError
from gigachat_agents.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def load_events(path: Path) -> list[Event]:
    """Load event payloads from a JSON file holding a list of objects.

    Raises:
        ValidationError: If the file does not hold objects.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValidationError(
            f"{path} must contain a JSON object or a list of objects",
            details={"path": str(path)},
        )
    return [Event(payload=item) for item in data]


def build_options(
    labels: list[str] | None,
    min_similarity: float | None,
    text: str | None,
) -> ClassifierOptions:
    """Merge command line overrides into options built from settings.

    Raises:
        ConfigurationError: If the resulting options are invalid.
    """
    settings = get_settings()
    gigachat = settings.gigachat
    classifier = settings.classifier

    overrides: dict[str, Any] = {
        "credentials": gigachat.credentials.get_secret_value() if gigachat.credentials else "",
        "scope": gigachat.scope,
        "labels": labels if labels is not None else classifier.labels,
        "min_similarity": (
            min_similarity if min_similarity is not None else classifier.min_similarity
        ),
        "text": text if text is not None else classifier.text,
        "model": classifier.model,
        "expected_receive_period_in_days": classifier.expected_receive_period_in_days,
    }
    return ClassifierOptions.build(**overrides)


async def run_classifier(
    events_path: Path,
    labels: list[str] | None = None,
    min_similarity: float | None = None,
    text: str | None = None,
    output_path: Path | None = None,
) -> bool:
    """Classify events and print a summary.

    Args:
        events_path: Path to events JSON file.
        labels: Labels overriding CLASSIFIER_LABELS.
        min_similarity: Threshold overriding CLASSIFIER_MIN_SIMILARITY.
        text: Text template overriding CLASSIFIER_TEXT.
        output_path: Optional path to save emitted events as JSON.

    Returns:
        True if the classifier was configured and ran, False otherwise.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)

    try:
        options = build_options(labels, min_similarity, text)
    except ConfigurationError as e:
        logger.error(e.message, extra={"errors": e.details.get("errors", [])})
        print(f"Invalid configuration: {e.message}", file=sys.stderr)
        return False

    logger.info(f"Loading events from {events_path}")
    try:
        events = load_events(events_path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load events: {e}")
        print(f"Invalid events file: {e}", file=sys.stderr)
        return False

    agent = EmbeddingClassifierAgent(options, settings=settings.gigachat)
    emitted: list[Event] = []
    try:
        logger.info(f"Classifying {len(events)} events into {len(options.labels)} labels")
        print("\n" + "=" * 60)
        print("CLASSIFICATION RESULTS")
        print("=" * 60)
        for event in events:
            outcome = await agent.handle_event(event)
            if outcome.event is None:
                print(f"{event.id}: skipped ({outcome.label})")
                continue
            emitted.append(outcome.event)
            selected = outcome.event.payload["labels"]
            print(f"{event.id}: {', '.join(selected) if selected else '-'}")
            for label, score in outcome.event.payload["similarities"].items():
                print(f"  {label}: {score:.4f}")
    finally:
        await agent.close()

    print("=" * 60)
    print(f"Total Events: {len(events)}")
    print(f"Emitted: {len(emitted)}")
    print(f"Skipped: {len(events) - len(emitted)}")

    if output_path:
        output_data = [event.payload for event in emitted]
        output_path.write_text(json.dumps(output_data, indent=2, ensure_ascii=False))
        logger.info(f"Results saved to {output_path}")

    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Classify events by embedding similarity to labels",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="Path to JSON file with an event payload or a list of payloads",
    )
    parser.add_argument(
        "--labels",
        nargs="+",
        default=None,
        help="Labels to classify into (defaults to CLASSIFIER_LABELS)",
    )
    parser.add_argument(
        "--min-similarity",
        type=float,
        default=None,
        help="Minimum cosine similarity (0-1)",
    )
    parser.add_argument(
        "--text",
        default=None,
        help="Template producing the text to classify, e.g. '{{title}} {{description}}'",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to save emitted events JSON",
    )

    args = parser.parse_args()

    ok = asyncio.run(
        run_classifier(
            events_path=args.events,
            labels=args.labels,
            min_similarity=args.min_similarity,
            text=args.text,
            output_path=args.output,
        )
    )

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
