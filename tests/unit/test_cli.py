"""Unit tests for the command-line interface."""

import pandas as pd
import pytest
from click.testing import CliRunner

from dicer_consensus.cli import cli
from dicer_consensus.io import write_dataframe


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def chimeric_file(tmp_path, chimeric_table):
    return write_dataframe(chimeric_table, tmp_path / "clusters.tsv")


class TestConsensusCommand:
    """Tests for the consensus command."""

    def test_basic_run(self, runner, chimeric_file, tmp_path):
        """Writes the annotated table and a summary."""
        out = tmp_path / "out" / "consensus.tsv"
        result = runner.invoke(cli, ["consensus", "-i", str(chimeric_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Consensus complete: 5/5 clusters" in result.output

        df = pd.read_csv(out, sep="\t", keep_default_na=False)
        assert df["DicerConsensus"].astype(str).tolist() == ["24", "24", "22", "24", "21"]
        assert (tmp_path / "out" / "consensus_summary.csv").exists()

    def test_chimeric_tidy(self, runner, chimeric_file, tmp_path):
        """Chimeric filter and tidy options are applied."""
        out = tmp_path / "consensus.csv"
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(out),
            "--chimeric", "--genome-id", "B_chr1",
            "--control", "self_1", "--control", "self_2",
            "--tidy",
        ])
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out)
        assert df["Cluster"].tolist() == ["cluster_1", "cluster_3", "cluster_4", "cluster_5"]

    def test_config_file(self, runner, chimeric_file, tmp_path):
        """Options can come from a YAML config."""
        config = tmp_path / "consensus.yaml"
        config.write_text("consensus:\n  conditions: [hetero_1, hetero_2]\n  tidy: true\n")
        out = tmp_path / "consensus.tsv"
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(out), "-c", str(config),
        ])
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out, sep="\t", keep_default_na=False)
        assert df["DicerCounts"].tolist() == [2, 2, 2, 1, 2]

    def test_invalid_condition(self, runner, chimeric_file, tmp_path):
        """Validation errors exit non-zero without output."""
        out = tmp_path / "consensus.tsv"
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(out), "--condition", "nope",
        ])
        assert result.exit_code == 1
        assert "nope" in result.output
        assert not out.exists()

    def test_chimeric_without_genome(self, runner, chimeric_file, tmp_path):
        """Chimeric mode needs a genome id."""
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(tmp_path / "x.tsv"),
            "--chimeric", "--control", "self_1",
        ])
        assert result.exit_code == 1
        assert "genome id" in result.output

    def test_zero_n_jobs(self, runner, chimeric_file, tmp_path):
        """Bad settings exit with a message instead of a traceback."""
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(tmp_path / "x.tsv"),
            "--n-jobs", "0",
        ])
        assert result.exit_code == 1
        assert "n_jobs must be non-zero" in result.output

    def test_bad_vocabulary_in_config(self, runner, chimeric_file, tmp_path):
        """An invalid window in the YAML config exits cleanly."""
        config = tmp_path / "consensus.yaml"
        config.write_text("consensus:\n  vocabulary:\n    dicer_min: 24\n    dicer_max: 20\n")
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(tmp_path / "x.tsv"),
            "-c", str(config),
        ])
        assert result.exit_code == 1
        assert "dicer_min/dicer_max" in result.output

    def test_log_file(self, runner, chimeric_file, tmp_path):
        """--log writes a timestamped run log."""
        result = runner.invoke(cli, [
            "consensus", "-i", str(chimeric_file), "-o", str(tmp_path / "x.tsv"),
            "--log", str(tmp_path / "logs" / "consensus.log"),
        ])
        assert result.exit_code == 0, result.output
        logs = list((tmp_path / "logs").glob("consensus_*.log"))
        assert len(logs) == 1
        assert "[CONSENSUS]" in logs[0].read_text()


class TestSamplesCommand:
    """Tests for the samples command."""

    def test_lists_samples(self, runner, chimeric_file):
        """Prints one sample per line."""
        result = runner.invoke(cli, ["samples", "-i", str(chimeric_file)])
        assert result.exit_code == 0
        assert result.output.split() == ["hetero_1", "hetero_2", "self_1", "self_2"]

    def test_no_samples(self, runner, tmp_path):
        """A table without dicercall columns fails."""
        path = tmp_path / "plain.csv"
        path.write_text("Cluster,chr\nc1,A_chr1\n")
        result = runner.invoke(cli, ["samples", "-i", str(path)])
        assert result.exit_code == 1
