"""Tests for the gradecore command line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from gradecore import __version__
from gradecore.cli.main import cli
from gradecore.storage import Database, SqlGradeStore, SubmissionRecord, init_database

GRADEBOOK_YAML = """
course:
  id: bio-101
  name: Biology
weights:
  assignments: 0.5
  quizzes: 0.3
  participation: 0.1
  attendance: 0.1
items:
  - {category: assignment, score: 45, max_points: 50}
  - {type: Quiz, score: 8, max_points: 10}
  - {type: Attendance, score: 1, max_points: 1}
"""

INVALID_WEIGHTS_YAML = """
course: {id: bio-101, name: Biology}
weights: {assignments: 0.5, quizzes: 0.5, participation: 0.5, attendance: 0.1}
items:
  - {category: assignment, score: 80, max_points: 100}
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every command away from any gradecore.config.yaml."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GRADECORE_DATABASE_URL", raising=False)


@pytest.fixture
def gradebook_file(tmp_path: Path) -> Path:
    """Write a gradebook file."""
    path = tmp_path / "gradebook.yaml"
    path.write_text(GRADEBOOK_YAML)
    return path


@pytest.fixture
def scores_file(tmp_path: Path) -> Path:
    """Write a score list file."""
    path = tmp_path / "scores.yaml"
    path.write_text("scores: [49, 64, 81, 100]\n")
    return path


@pytest.fixture
def database_url(
    tmp_path: Path, sample_records: list[SubmissionRecord]
) -> str:
    """Create a SQLite grade store seeded with the sample records."""
    url = f"sqlite:///{tmp_path / 'grades.db'}"
    database = init_database(url)
    store = SqlGradeStore(database)
    for record in sample_records:
        store.add_submission(record)
    database.close()
    return url


def _stored_scores(url: str) -> list[float | None]:
    database = Database(url)
    try:
        store = SqlGradeStore(database)
        return [
            store.get_submission(sid).score  # type: ignore[union-attr]
            for sid in ("s1", "s2", "s3", "s4")
        ]
    finally:
        database.close()


class TestCliGroup:
    """Tests for the top-level command group."""

    def test_version(self, cli_runner: CliRunner) -> None:
        """Test --version prints the package version."""
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        """Test --help lists every command."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("grade", "stats", "curve", "commit", "export", "config"):
            assert command in result.output


class TestGradeCommand:
    """Tests for 'gradecore grade'."""

    def test_grade_console(self, cli_runner: CliRunner, gradebook_file: Path) -> None:
        """Test the course grade table and summary."""
        result = cli_runner.invoke(cli, ["grade", str(gradebook_file)])

        assert result.exit_code == 0
        assert "Biology" in result.output
        assert "Letter: B+" in result.output

    def test_grade_json(self, cli_runner: CliRunner, gradebook_file: Path) -> None:
        """Test JSON output of the course grade."""
        result = cli_runner.invoke(cli, ["grade", str(gradebook_file), "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        # (0.5*90 + 0.3*80 + 0.1*100) / 0.9, participation has no data
        assert data["result"]["overall_percentage"] == pytest.approx(87.78)
        assert data["result"]["letter_grade"] == "B+"
        assert data["result"]["breakdowns"]["participation"]["percentage"] is None

    def test_grade_invalid_weights_normalized(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test invalid weights are normalized with a warning by default."""
        path = tmp_path / "gradebook.yaml"
        path.write_text(INVALID_WEIGHTS_YAML)

        result = cli_runner.invoke(cli, ["grade", str(path)])

        assert result.exit_code == 0
        assert "normalized" in result.output

    def test_grade_invalid_weights_strict(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test --strict turns invalid weights into an error."""
        path = tmp_path / "gradebook.yaml"
        path.write_text(INVALID_WEIGHTS_YAML)

        result = cli_runner.invoke(cli, ["grade", str(path), "--strict"])

        assert result.exit_code == 2
        assert "must sum to 1.0" in result.output

    def test_grade_invalid_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a malformed gradebook is reported."""
        path = tmp_path / "gradebook.yaml"
        path.write_text("items: []\n")

        result = cli_runner.invoke(cli, ["grade", str(path)])

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_grade_missing_file(self, cli_runner: CliRunner) -> None:
        """Test a missing file is a usage error."""
        result = cli_runner.invoke(cli, ["grade", "missing.yaml"])
        assert result.exit_code == 2


class TestStatsCommand:
    """Tests for 'gradecore stats'."""

    def test_stats_console(self, cli_runner: CliRunner, scores_file: Path) -> None:
        """Test the distribution table."""
        result = cli_runner.invoke(cli, ["stats", str(scores_file)])

        assert result.exit_code == 0
        assert "Score distribution" in result.output
        assert "90-100" in result.output

    def test_stats_json(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test statistics as JSON."""
        path = tmp_path / "scores.yaml"
        path.write_text("[55, 65, 75, 85, 95]\n")

        result = cli_runner.invoke(cli, ["stats", str(path), "--output", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)["result"]
        assert data["count"] == 5
        assert data["mean"] == 75.0
        assert data["std_dev"] == pytest.approx(14.1421)

    def test_stats_bad_scores(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test non-numeric scores are reported."""
        path = tmp_path / "scores.yaml"
        path.write_text("[55, abc]\n")

        result = cli_runner.invoke(cli, ["stats", str(path)])

        assert result.exit_code == 2
        assert "expected a number" in result.output

    @pytest.mark.parametrize("value", [".nan", ".inf", "-.inf"])
    def test_stats_non_finite_scores(
        self, cli_runner: CliRunner, tmp_path: Path, value: str
    ) -> None:
        """Test NaN and infinite scores are reported, not computed."""
        path = tmp_path / "scores.yaml"
        path.write_text(f"scores: [{value}, 50]\n")

        result = cli_runner.invoke(cli, ["stats", str(path)])

        assert result.exit_code == 2
        assert "expected a finite number" in result.output


class TestCurveCommand:
    """Tests for 'gradecore curve'."""

    def test_curve_square_root_json(
        self, cli_runner: CliRunner, scores_file: Path
    ) -> None:
        """Test a square root preview."""
        result = cli_runner.invoke(
            cli, ["curve", str(scores_file), "--policy", "square_root", "-o", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)["result"]
        assert data["curved"] == [70.0, 80.0, 90.0, 100.0]
        assert data["after"]["mean"] == 85.0

    def test_curve_console(self, cli_runner: CliRunner, scores_file: Path) -> None:
        """Test the before/after table."""
        result = cli_runner.invoke(
            cli, ["curve", str(scores_file), "--policy", "flat", "--points", "5"]
        )

        assert result.exit_code == 0
        assert "Curve: flat" in result.output
        assert "After" in result.output

    def test_curve_outside_recommended_range(
        self, cli_runner: CliRunner, scores_file: Path
    ) -> None:
        """Test a warning for parameters outside the recommended range."""
        result = cli_runner.invoke(
            cli, ["curve", str(scores_file), "--policy", "flat", "--points", "50"]
        )

        assert result.exit_code == 0
        assert "outside the recommended range" in result.output

    def test_curve_missing_parameter(
        self, cli_runner: CliRunner, scores_file: Path
    ) -> None:
        """Test a policy without its parameters is a usage error."""
        result = cli_runner.invoke(
            cli,
            ["curve", str(scores_file), "--policy", "bell", "--target-mean", "75"],
        )

        assert result.exit_code == 2
        assert "--target-std-dev" in result.output

    def test_curve_negative_scores_square_root(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test negative scores are rejected by the square root curve."""
        path = tmp_path / "scores.yaml"
        path.write_text("[-4, 50]\n")

        result = cli_runner.invoke(
            cli, ["curve", str(path), "--policy", "square_root"]
        )

        assert result.exit_code == 2
        assert "non-negative" in result.output

    def test_curve_non_finite_scores(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test a NaN score is rejected before curving."""
        path = tmp_path / "scores.yaml"
        path.write_text("scores: [.nan, 50]\n")

        result = cli_runner.invoke(
            cli, ["curve", str(path), "--policy", "flat", "--points", "5"]
        )

        assert result.exit_code == 2
        assert "expected a finite number" in result.output


class TestCommitCommand:
    """Tests for 'gradecore commit'."""

    def _args(self, database_url: str, *extra: str) -> list[str]:
        return [
            "commit",
            "--database",
            database_url,
            "--course",
            "bio-101",
            "--policy",
            "flat",
            "--points",
            "5",
            *extra,
        ]

    def test_commit(self, cli_runner: CliRunner, database_url: str) -> None:
        """Test committing a curve updates stored grades."""
        result = cli_runner.invoke(
            cli, self._args(database_url, "--assignment", "lab-3", "--yes")
        )

        assert result.exit_code == 0
        assert "Curved 3 grades." in result.output
        assert _stored_scores(database_url) == [65.0, 75.0, 85.0, None]

    def test_commit_confirmed(self, cli_runner: CliRunner, database_url: str) -> None:
        """Test the preview is shown and the prompt accepted."""
        result = cli_runner.invoke(
            cli, self._args(database_url, "--assignment", "lab-3"), input="y\n"
        )

        assert result.exit_code == 0
        assert "Curve: flat" in result.output
        assert _stored_scores(database_url) == [65.0, 75.0, 85.0, None]

    def test_commit_declined(self, cli_runner: CliRunner, database_url: str) -> None:
        """Test declining the prompt changes nothing."""
        result = cli_runner.invoke(
            cli, self._args(database_url, "--assignment", "lab-3"), input="n\n"
        )

        assert result.exit_code == 1
        assert _stored_scores(database_url) == [60.0, 70.0, 80.0, None]

    def test_commit_json_prompt_on_stderr(
        self, cli_runner: CliRunner, database_url: str
    ) -> None:
        """Test the preview and prompt stay off stdout so it holds only JSON."""
        result = cli_runner.invoke(
            cli,
            self._args(database_url, "--assignment", "lab-3", "-o", "json"),
            input="y\n",
        )

        assert result.exit_code == 0
        assert "Curve: flat" in result.stderr
        assert "Curve: flat" not in result.stdout
        assert "grades?" not in result.stdout
        data = json.loads(result.stdout[result.stdout.index("{") :])
        assert data["result"]["status"] == "committed"

    @pytest.mark.parametrize(
        "url", ["not-a-url", "sqlite:///{tmp}/missing/grades.db"]
    )
    def test_commit_unusable_database(
        self, cli_runner: CliRunner, tmp_path: Path, url: str
    ) -> None:
        """Test a malformed or unreachable database URL is reported."""
        url = url.format(tmp=tmp_path)
        result = cli_runner.invoke(
            cli, self._args(url, "--assignment", "lab-3", "--yes")
        )

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_commit_nothing_to_curve(
        self, cli_runner: CliRunner, database_url: str
    ) -> None:
        """Test an assignment without graded work exits with failure."""
        result = cli_runner.invoke(
            cli, self._args(database_url, "--assignment", "missing", "--yes")
        )

        assert result.exit_code == 1
        assert "Nothing to curve" in result.output

    def test_commit_database_from_env(
        self, cli_runner: CliRunner, database_url: str
    ) -> None:
        """Test the database URL can come from the environment."""
        result = cli_runner.invoke(
            cli,
            [
                "commit",
                "--course",
                "bio-101",
                "--assignment",
                "lab-3",
                "--policy",
                "square_root",
                "--yes",
            ],
            env={"GRADECORE_DATABASE_URL": database_url},
        )

        assert result.exit_code == 0
        assert _stored_scores(database_url)[0] == pytest.approx(77.459667)

    def test_commit_without_database(self, cli_runner: CliRunner) -> None:
        """Test a missing database is a usage error."""
        result = cli_runner.invoke(
            cli,
            [
                "commit",
                "--course",
                "bio-101",
                "--assignment",
                "lab-3",
                "--policy",
                "square_root",
                "--yes",
            ],
        )

        assert result.exit_code == 2
        assert "No database configured" in result.output


class TestExportCommand:
    """Tests for 'gradecore export'."""

    def test_export_stdout(self, cli_runner: CliRunner, database_url: str) -> None:
        """Test CSV is written to stdout, ungraded work included."""
        result = cli_runner.invoke(
            cli,
            [
                "export",
                "--database",
                database_url,
                "--course",
                "bio-101",
                "--assignment",
                "lab-3",
            ],
        )

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Student Name,Assignment,Grade,Letter Grade,Feedback"
        assert lines[1] == "Ada,lab-3,60.0%,D-,"
        assert lines[4] == "Edsger,lab-3,Not Graded,--,"
        assert len(lines) == 5

    def test_export_file(
        self, cli_runner: CliRunner, database_url: str, tmp_path: Path
    ) -> None:
        """Test CSV is written to a file."""
        output = tmp_path / "grades.csv"
        result = cli_runner.invoke(
            cli,
            [
                "export",
                "--database",
                database_url,
                "--course",
                "bio-101",
                "--assignment",
                "lab-3",
                "--output-file",
                str(output),
            ],
        )

        assert result.exit_code == 0
        assert "Exported 4 grades" in result.output
        assert output.read_text().startswith("Student Name,")


class TestConfigCommand:
    """Tests for 'gradecore config'."""

    def test_config_defaults(self, cli_runner: CliRunner) -> None:
        """Test the effective default configuration is printed."""
        result = cli_runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["grading"]["strict_weights"] is False
        assert data["grading"]["default_weights"]["assignments"] == 0.4

    def test_config_file_option(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test --config loads an explicit file."""
        config = tmp_path / "custom.yaml"
        config.write_text("database_url: sqlite:///custom.db\n")

        result = cli_runner.invoke(cli, ["--config", str(config), "config"])

        assert result.exit_code == 0
        assert json.loads(result.output)["database_url"] == "sqlite:///custom.db"

    def test_config_discovered_file(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test gradecore.config.yaml in the working directory is used."""
        (tmp_path / "gradecore.config.yaml").write_text(
            "grading:\n  strict_weights: true\n"
        )

        result = cli_runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert json.loads(result.output)["grading"]["strict_weights"] is True

