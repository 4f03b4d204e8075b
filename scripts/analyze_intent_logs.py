#!/usr/bin/env python3
"""
Analyze pipeline INTENT_SUMMARY log lines: which intents fire, which actions
come back, and what people say that no rule understands.

Usage:
  python scripts/analyze_intent_logs.py
  python scripts/analyze_intent_logs.py --log-dir logs --variant assistant --top 30
"""

from __future__ import annotations

import argparse
import glob
import json
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

UNHANDLED = "unhandled"


@dataclass
class IntentEvent:
    file: str
    trace_id: str
    variant: str
    intent: str
    rule: Optional[int]
    action: str
    language: str
    utterance: str


def parse_line(line: str, file_name: str) -> IntentEvent | None:
    if "INTENT_SUMMARY | " not in line:
        return None

    parts = line.split("│")
    if len(parts) < 4:
        return None

    trace_id = parts[1].strip()
    message = "│".join(parts[3:]).strip()
    _, _, payload_raw = message.partition("|")
    payload_raw = payload_raw.strip()
    if not payload_raw:
        return None

    try:
        payload = json.loads(payload_raw)
    except json.JSONDecodeError:
        return None

    rule = payload.get("rule")
    return IntentEvent(
        file=file_name,
        trace_id=trace_id,
        variant=str(payload.get("variant") or "unknown"),
        intent=str(payload.get("intent") or UNHANDLED),
        rule=rule if isinstance(rule, int) else None,
        action=str(payload.get("action") or "none"),
        language=str(payload.get("language") or "en"),
        utterance=str(payload.get("utterance") or ""),
    )


def discover_log_files(log_dir: Path) -> list[Path]:
    patterns = [
        str(log_dir / "pipeline-*.log"),
        str(log_dir / "pipeline-*.log.*"),
    ]
    files: list[Path] = []
    for pattern in patterns:
        files.extend(Path(p) for p in glob.glob(pattern))
    return sorted(set(files))


def load_events(files: list[Path]) -> list[IntentEvent]:
    events: list[IntentEvent] = []
    for path in files:
        try:
            with path.open("r", encoding="utf-8") as fh:
                for line in fh:
                    event = parse_line(line, path.name)
                    if event:
                        events.append(event)
        except FileNotFoundError:
            continue
    return events


def intent_distribution(events: list[IntentEvent]) -> list[tuple[str, int, float]]:
    counts = Counter(e.intent for e in events)
    total = max(len(events), 1)
    return [(name, n, 100.0 * n / total) for name, n in counts.most_common()]


def top_unhandled(events: list[IntentEvent], top: int) -> list[tuple[str, int]]:
    counts = Counter(
        e.utterance.strip().lower() for e in events if e.intent == UNHANDLED and e.utterance.strip()
    )
    return counts.most_common(top)


def print_report(events: list[IntentEvent], top: int) -> None:
    print("\nIntent Distribution")
    print("intent,count,share_pct")
    for name, n, share in intent_distribution(events):
        print(f"{name},{n},{share:.1f}")

    print("\nAction Mix")
    print("action,count")
    for action, n in Counter(e.action for e in events).most_common():
        print(f"{action},{n}")

    print("\nLanguages")
    print("language,count")
    for language, n in Counter(e.language for e in events).most_common():
        print(f"{language},{n}")

    print(f"\nTop {top} Unhandled Utterances")
    print("count,utterance")
    for utterance, n in top_unhandled(events, top):
        print(f"{n},{json.dumps(utterance, ensure_ascii=False)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Analyze pipeline intent summaries")
    parser.add_argument("--log-dir", default="logs", help="Directory containing pipeline logs")
    parser.add_argument("--top", type=int, default=20, help="Number of unhandled utterances to print")
    parser.add_argument("--variant", default="", help="Only count one variant (basic or assistant)")
    args = parser.parse_args()

    log_dir = Path(args.log_dir)
    files = discover_log_files(log_dir)
    if not files:
        print(f"No pipeline logs found in: {log_dir}")
        return 1

    events = load_events(files)
    if args.variant:
        events = [e for e in events if e.variant == args.variant.strip().lower()]

    if not events:
        print("No INTENT_SUMMARY entries found.")
        return 1

    print(f"Loaded {len(events)} intent events from {len(files)} files.")
    print_report(events, max(args.top, 1))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
