#!/usr/bin/env python3
import argparse
import os
import sys
from pathlib import Path
from typing import List

import requests


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Text matching API demo")
    parser.add_argument(
        "files", type=Path, nargs="+", help="Text files to upload and compare"
    )
    parser.add_argument("--strategy", default="WORD", help="Tokenization strategy")
    parser.add_argument(
        "--min-match-length", type=int, default=3, help="Minimum match length"
    )
    parser.add_argument("--metric", default="AVG", help="Metric used for ranking")
    parser.add_argument(
        "--top", type=int, default=3, help="Number of top pairs to display",
    )
    parser.add_argument(
        "--api-url",
        default=os.environ.get("TEXT_MATCHING_API_URL", "http://localhost:8000"),
        help="Base URL of the text matching API",
    )
    return parser.parse_args()


def upload_texts(api_url: str, files: List[Path]) -> None:
    for path in files:
        response = requests.post(
            f"{api_url}/texts",
            json={"identifier": path.name, "content": path.read_text(encoding="utf-8")},
            timeout=30,
        )
        response.raise_for_status()


def call_analyze(api_url: str, strategy: str, min_match_length: int) -> dict:
    response = requests.post(
        f"{api_url}/analyze",
        json={"strategy": strategy, "min_match_length": min_match_length},
        timeout=120,
    )
    response.raise_for_status()
    return response.json()


def fetch_ranking(api_url: str, metric: str, limit: int) -> list:
    response = requests.get(
        f"{api_url}/results", params={"metric": metric, "limit": limit}, timeout=30
    )
    response.raise_for_status()
    return response.json()


def main() -> None:
    args = parse_args()

    if len(args.files) < 2:
        print("Provide at least two text files to compare.")
        sys.exit(1)

    upload_texts(args.api_url, args.files)
    summary = call_analyze(args.api_url, args.strategy, args.min_match_length)
    print(
        f"Analyzed {summary['pairs']} pairs with {summary['strategy']}"
        f" (mml={summary['min_match_length']}) in {summary['elapsed_ms']:.0f}ms"
    )

    ranking = fetch_ranking(args.api_url, args.metric, args.top)
    if not ranking:
        print("No pairs to display.")
        return

    for idx, pair in enumerate(ranking, start=1):
        print("-" * 80)
        print(f"Pair {idx}: {pair['text_a']} <-> {pair['text_b']}")
        print(f"  {args.metric.upper()}: {pair['formatted_score']}")
    print("-" * 80)


if __name__ == "__main__":
    main()
