"""
Input file readers for the Brand Visibility CLI.

Functions:
    load_responses: Read LLM answers from a JSON file or a directory of text files
    load_prompts: Read candidate prompts from a JSON list or a one-per-line file

Readers raise InputFileError for unreadable or malformed files. Individual
entries that are not usable answers (null, missing "text") are returned as
None so the analysis counts them as failed responses.
"""

import json
import logging
from pathlib import Path

from brand_visibility.exceptions import InputFileError

logger = logging.getLogger(__name__)

RESPONSE_FILE_SUFFIXES = (".txt", ".md")


def _read_text(path: Path) -> str:
    """Read a UTF-8 file, wrapping OS and decoding errors in InputFileError."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Cannot read {path}: {e}") from e


def _read_json(path: Path) -> object:
    """Parse a JSON file, wrapping errors in InputFileError."""
    try:
        return json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        raise InputFileError(f"Invalid JSON in {path}: {e}") from e


def load_responses(path: str | Path) -> list[str | None]:
    """
    Load LLM answers for analysis.

    Accepted layouts:
    - JSON file holding a list of strings, nulls, or {"text": ...} objects
    - Directory of .txt/.md files, one answer per file, read in name order

    Args:
        path: JSON file or directory

    Returns:
        Answers in order; None for entries without usable text

    Raises:
        InputFileError: If path is missing, unreadable, or not a JSON list
    """
    path = Path(path)

    if not path.exists():
        raise InputFileError(f"Responses path not found: {path}")

    if path.is_dir():
        files = sorted(
            p for p in path.iterdir() if p.is_file() and p.suffix.lower() in RESPONSE_FILE_SUFFIXES
        )
        logger.info(
            "Loading responses from directory",
            extra={"context": {"path": str(path), "files": len(files)}},
        )
        return [_read_text(p) for p in files]

    data = _read_json(path)
    if not isinstance(data, list):
        raise InputFileError(
            f"Responses file must contain a JSON list, got {type(data).__name__}: {path}"
        )

    responses: list[str | None] = []
    for item in data:
        if isinstance(item, str):
            responses.append(item)
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            responses.append(item["text"])
        else:
            responses.append(None)

    logger.info(
        "Loaded responses file",
        extra={
            "context": {
                "path": str(path),
                "responses": len(responses),
                "missing": sum(1 for r in responses if r is None),
            }
        },
    )
    return responses


def load_prompts(path: str | Path) -> list[str]:
    """
    Load candidate prompts.

    A file ending in .json (or whose content starts with "[") must hold a
    JSON list of strings. Anything else is read as one prompt per line;
    blank lines are skipped.

    Raises:
        InputFileError: If the file is missing, unreadable, or malformed
    """
    path = Path(path)

    if not path.is_file():
        raise InputFileError(f"Prompts file not found: {path}")

    content = _read_text(path)

    if path.suffix.lower() == ".json" or content.lstrip().startswith("["):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InputFileError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
            raise InputFileError(f"Prompts file must contain a JSON list of strings: {path}")
        return data

    return [line.strip() for line in content.splitlines() if line.strip()]
