"""Tests for the command-line interface."""

import csv
import json

from cowfoot.batch.cli import cli_main
from cowfoot.batch.columns import write_template


class TestTemplateCommand:
    """Tests for 'cowfoot template'."""

    def test_writes_template(self, tmp_path, capsys):
        """Verify the template command writes a CSV and reports it."""
        path = tmp_path / "template.csv"
        assert cli_main(["template", str(path)]) == 0
        assert path.exists()
        assert "Wrote template" in capsys.readouterr().out


class TestBatchCommand:
    """Tests for 'cowfoot batch'."""

    def test_batch_over_examples(self, tmp_path, capsys):
        """Verify the example template runs end to end."""
        farms = write_template(tmp_path / "farms.csv", include_examples=True)
        output = tmp_path / "out.csv"
        report_json = tmp_path / "out.json"

        code = cli_main(["batch", str(farms), "--tier", "1", "--output", str(output), "--json", str(report_json)])

        assert code == 0
        assert output.exists()
        assert (tmp_path / "out_summary.csv").exists()
        data = json.loads(report_json.read_text())
        assert data["summary"]["n_succeeded"] == 2
        out = capsys.readouterr().out
        assert "FARM001" in out
        assert "Succeeded: 2" in out

    def test_include_overrides_scope(self, tmp_path, capsys):
        """Verify --include switches to a partial boundary and prints it."""
        farms = write_template(tmp_path / "farms.csv", include_examples=True)
        output = tmp_path / "out.csv"

        cli_main(["batch", str(farms), "--include", "enteric,manure", "--output", str(output)])

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert {r["boundaries_used"] for r in rows} == {"partial"}
        assert all(float(r["emissions_energy"]) == 0.0 for r in rows)
        assert "boundary: partial (enteric, manure)" in capsys.readouterr().out

    def test_failed_farm_sets_exit_code(self, tmp_path):
        """Verify a failed farm gives exit code 2."""
        farms = tmp_path / "farms.csv"
        farms.write_text("FarmID,Milk_litres,Cows_milking,Diesel_litres\nF1,1000,10,-5\nF2,1000,10,5\n")
        assert cli_main(["batch", str(farms), "--output", str(tmp_path / "out.csv")]) == 2

    def test_empty_csv(self, tmp_path):
        """Verify a CSV with no farms gives exit code 1."""
        farms = tmp_path / "farms.csv"
        farms.write_text("FarmID,Milk_litres,Cows_milking\n")
        assert cli_main(["batch", str(farms)]) == 1


class TestNoCommand:
    """Tests for running without a subcommand."""

    def test_prints_help(self, capsys):
        """Verify running without a command prints usage."""
        assert cli_main([]) == 1
        assert "usage" in capsys.readouterr().out
