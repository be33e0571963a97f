from pathlib import Path
from typing import Sequence

import pandas as pd

from .service import RankedResult

REPORT_COLUMNS = ["TextA", "TextB", "Score", "Matches", "LongestMatch"]


def build_report(ranked: Sequence[RankedResult]) -> pd.DataFrame:
    rows = [
        {
            "TextA": item.result.text_a.identifier,
            "TextB": item.result.text_b.identifier,
            "Score": item.formatted,
            "Matches": len(item.result.matches),
            "LongestMatch": item.result.longest_match_length,
        }
        for item in ranked
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def write_report(output_path: Path, ranked: Sequence[RankedResult]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    build_report(ranked).to_csv(output_path, index=False, encoding="utf-8")
