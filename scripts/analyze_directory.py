import argparse
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from text_matching.loader import load_text_directory
from text_matching.metrics import MetricFactory
from text_matching.models import MatchingConfig
from text_matching.report import write_report
from text_matching.service import TextMatchingService
from text_matching.tokenizers import available_tokenizers


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare every pair of texts in a directory and write a score report"
    )
    parser.add_argument(
        "dataset", type=Path, help="Path to directory containing .txt files"
    )
    parser.add_argument("output", type=Path, help="Where to write the report CSV")
    parser.add_argument(
        "--strategy",
        default="WORD",
        type=str.upper,
        choices=list(available_tokenizers()),
        help="Tokenization strategy",
    )
    parser.add_argument(
        "--min-match-length",
        type=int,
        default=3,
        help="Shortest run of equal tokens reported as a match",
    )
    parser.add_argument(
        "--metric",
        default="AVG",
        type=str.upper,
        choices=list(MetricFactory.available()),
        help="Metric used to rank pairs",
    )
    parser.add_argument(
        "--limit", type=int, help="Limit number of texts loaded (for testing)"
    )
    parser.add_argument(
        "--simhash-threshold",
        type=float,
        default=0.0,
        help="Skip pairs whose SimHash similarity is below this value (0 disables)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s %(message)s",
    )

    logging.info("Loading texts from %s", args.dataset)
    texts = load_text_directory(args.dataset, limit=args.limit)
    if len(texts) < 2:
        raise SystemExit("Need at least 2 texts in the dataset directory")

    config = MatchingConfig(
        strategy=args.strategy,
        min_match_length=args.min_match_length,
        default_metric=args.metric,
        simhash_threshold=args.simhash_threshold,
    )
    service = TextMatchingService(texts, config=config)

    logging.info("Loaded %d texts. Analyzing all pairs...", len(texts))
    try:
        analysis = service.analyze()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    ranked = service.top_results(args.metric, limit=len(analysis))
    logging.info("Writing report to %s", args.output)
    write_report(args.output, ranked)
    logging.info("Done.")


if __name__ == "__main__":
    main()
