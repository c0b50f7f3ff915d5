"""Load person/course/site preferences from CSV files."""

from pathlib import Path

import pandas as pd

from course_allocator.types import PreferenceMatrix

KEY_COLUMNS = ["person", "course", "site"]
SCORE_COLUMN = "preference"


def load_preferences_from_csv(
    filepath: Path | str,
) -> tuple[list[str], list[str], list[str], PreferenceMatrix]:
    """Load a long-format preferences CSV and zero-fill the full product.

    Args:
        filepath: Path to CSV with columns person, course, site, preference.
            Combinations absent from the file get a preference of 0.

    Returns:
        Tuple of (persons, courses, sites, matrix) where the entity lists are
        the sorted unique identifiers in the file and matrix covers every
        (person, course, site) combination.

    Raises:
        ValueError: If the CSV is empty, malformed, has blank identifiers or duplicate
            rows for a combination, or has non-numeric or negative preferences.
    """
    if isinstance(filepath, str):
        filepath = Path(filepath)

    try:
        df = pd.read_csv(filepath)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file is empty: {filepath}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse CSV: {e}") from e

    df.columns = [str(col).strip().lower() for col in df.columns]
    missing_columns = [col for col in KEY_COLUMNS + [SCORE_COLUMN] if col not in df.columns]
    if missing_columns:
        raise ValueError(f"CSV file is missing columns {missing_columns}: {filepath}")

    if df.empty:
        raise ValueError(f"CSV file contains no data rows: {filepath}")

    blank = df[KEY_COLUMNS].isna().any(axis=1)
    for col in KEY_COLUMNS:
        df[col] = df[col].astype(str).str.strip()
        blank |= df[col] == ""
    if blank.any():
        row = int(blank.to_numpy().nonzero()[0][0]) + 1
        raise ValueError(f"Blank person, course or site in data row {row}: {filepath}")

    duplicated = df[df.duplicated(subset=KEY_COLUMNS)]
    if not duplicated.empty:
        first = tuple(duplicated.iloc[0][KEY_COLUMNS])
        raise ValueError(f"Duplicate preference for {first}")

    scores = pd.to_numeric(df[SCORE_COLUMN], errors="coerce")
    if scores.isna().any():
        bad = df.loc[scores.isna(), SCORE_COLUMN].iloc[0]
        raise ValueError(f"Preference '{bad}' is not a number")
    if (scores < 0).any():
        raise ValueError("Preferences must be non-negative")

    persons = sorted(df["person"].unique())
    courses = sorted(df["course"].unique())
    sites = sorted(df["site"].unique())

    # Expand to the full cartesian product, defaulting absent combinations to 0
    full_index = pd.MultiIndex.from_product([persons, courses, sites], names=KEY_COLUMNS)
    filled = (
        scores.set_axis(pd.MultiIndex.from_frame(df[KEY_COLUMNS]))
        .reindex(full_index, fill_value=0.0)
        .astype(float)
    )

    return persons, courses, sites, PreferenceMatrix(filled.to_dict())
