from itertools import product
from pathlib import Path

import pandas as pd
import pytest

from course_allocator.data_loader import load_preferences_from_csv
from course_allocator.types import PreferenceMatrix


class TestSampleDataFile:
    SAMPLE_PATH = Path(__file__).parent.parent / "data" / "sample_preferences.csv"

    def test_sample_preferences_file_exists(self):
        assert self.SAMPLE_PATH.exists()

    def test_sample_preferences_integrity(self):
        df = pd.read_csv(self.SAMPLE_PATH)
        assert df.columns.tolist() == ["person", "course", "site", "preference"]
        assert not df.duplicated(subset=["person", "course", "site"]).any()
        assert (df["preference"] >= 0).all()

    def test_sample_expands_to_full_product(self):
        persons, courses, sites, matrix = load_preferences_from_csv(self.SAMPLE_PATH)
        assert persons == ["P1", "P2", "P3"]
        assert courses == ["C1", "C2"]
        assert sites == ["S1", "S2"]
        assert len(matrix) == 12
        assert matrix["P2", "C2", "S1"] == 0


class TestLoadPreferencesFromCSV:
    @pytest.fixture
    def sample_csv(self, tmp_path: Path) -> Path:
        csv_content = """person,course,site,preference
ana,math,north,3
ana,art,south,2
ben,math,south,1.5
"""
        csv_path = tmp_path / "test_prefs.csv"
        csv_path.write_text(csv_content)
        return csv_path

    def test_returns_sorted_entity_sets(self, sample_csv: Path):
        persons, courses, sites, _ = load_preferences_from_csv(str(sample_csv))
        assert persons == ["ana", "ben"]
        assert courses == ["art", "math"]
        assert sites == ["north", "south"]

    def test_returns_preference_matrix(self, sample_csv: Path):
        *_, matrix = load_preferences_from_csv(sample_csv)
        assert isinstance(matrix, PreferenceMatrix)

    def test_scores_are_kept(self, sample_csv: Path):
        *_, matrix = load_preferences_from_csv(sample_csv)
        assert matrix["ana", "math", "north"] == 3
        assert matrix["ana", "art", "south"] == 2
        assert matrix["ben", "math", "south"] == 1.5

    def test_missing_combinations_default_to_zero(self, sample_csv: Path):
        persons, courses, sites, matrix = load_preferences_from_csv(sample_csv)
        assert set(matrix) == set(product(persons, courses, sites))
        assert matrix["ben", "art", "north"] == 0
        assert sum(1 for score in matrix.values() if score == 0) == 5

    def test_whitespace_is_stripped(self, tmp_path: Path):
        csv_path = tmp_path / "spaces.csv"
        csv_path.write_text("Person , Course,Site,Preference\n ana , math , north ,1\n")
        persons, courses, sites, _ = load_preferences_from_csv(csv_path)
        assert (persons, courses, sites) == (["ana"], ["math"], ["north"])


class TestCSVValidation:
    def test_empty_csv_raises_error(self, tmp_path: Path):
        """Empty CSV should raise ValueError."""
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_preferences_from_csv(csv_path)

    def test_headers_only_raises_error(self, tmp_path: Path):
        """CSV with only headers should raise ValueError."""
        csv_path = tmp_path / "headers_only.csv"
        csv_path.write_text("person,course,site,preference\n")

        with pytest.raises(ValueError, match="no data rows"):
            load_preferences_from_csv(csv_path)

    def test_missing_column_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "no_site.csv"
        csv_path.write_text("person,course,preference\nana,math,1\n")

        with pytest.raises(ValueError, match="missing columns"):
            load_preferences_from_csv(csv_path)

    def test_duplicate_row_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "duplicate.csv"
        csv_path.write_text(
            "person,course,site,preference\nana,math,north,1\nana,math,north,2\n"
        )

        with pytest.raises(ValueError, match="Duplicate preference"):
            load_preferences_from_csv(csv_path)

    def test_non_numeric_preference_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "text.csv"
        csv_path.write_text("person,course,site,preference\nana,math,north,high\n")

        with pytest.raises(ValueError, match="not a number"):
            load_preferences_from_csv(csv_path)

    def test_negative_preference_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "negative.csv"
        csv_path.write_text("person,course,site,preference\nana,math,north,-1\n")

        with pytest.raises(ValueError, match="non-negative"):
            load_preferences_from_csv(csv_path)

    @pytest.mark.parametrize(
        "row",
        ["ana,,north,1", ",math,north,1", "ana,math, ,1"],
    )
    def test_blank_identifier_raises_error(self, tmp_path: Path, row: str):
        csv_path = tmp_path / "blank.csv"
        csv_path.write_text(f"person,course,site,preference\nben,math,north,2\n{row}\n")

        with pytest.raises(ValueError, match="Blank person, course or site in data row 2"):
            load_preferences_from_csv(csv_path)
