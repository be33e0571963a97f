import json
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .models import Text


def load_jsonl(
    path: Path, id_field: str = "identifier", content_field: str = "content"
) -> List[Text]:
    texts: List[Text] = []
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            payload = json.loads(line)
            if id_field not in payload:
                raise ValueError(f"{path}:{line_number}: missing field '{id_field}'")
            texts.append(
                Text(
                    identifier=str(payload[id_field]),
                    content=payload.get(content_field) or "",
                )
            )
    return texts


def load_csv(path: Path, content_column: str, id_column: str) -> List[Text]:
    frame = pd.read_csv(path)
    texts: List[Text] = []
    for _, row in frame.iterrows():
        identifier = str(row[id_column])
        content = str(row[content_column]) if not pd.isna(row[content_column]) else ""
        texts.append(Text(identifier=identifier, content=content))
    return texts


def load_text_directory(
    directory: Path,
    pattern: str = "*.txt",
    encoding: str = "utf-8",
    limit: Optional[int] = None,
) -> List[Text]:
    if not directory.exists() or not directory.is_dir():
        raise FileNotFoundError(f"Directory {directory} not found")

    files = sorted(directory.glob(pattern), key=lambda p: p.name)
    texts: List[Text] = []

    for idx, file in enumerate(files, start=1):
        content = file.read_text(encoding=encoding)
        texts.append(Text(identifier=file.name, content=content))
        if idx % 100 == 0:
            logging.debug("Loaded %d text files", idx)
        if limit is not None and len(texts) >= limit:
            logging.info("Reached limit of %d files", limit)
            break

    return texts
