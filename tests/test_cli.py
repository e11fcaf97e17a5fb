"""Tests for the CLI interface."""

import json

from click.testing import CliRunner
from conftest import START_TIME_STR, make_check_data, make_vulnerability

from vulnreport.cli import cli
from vulnreport.codec import encode, encode_native
from vulnreport.models import Report, ResultData, Vulnerability


def _report(*vulnerabilities: Vulnerability, **overrides) -> Report:
    return Report.from_parts(make_check_data(**overrides), ResultData(vulnerabilities=list(vulnerabilities)))


class TestValidateCommand:
    def test_valid_report(self, write_report):
        path = write_report(encode(_report(make_vulnerability(score=3.9))))
        result = CliRunner().invoke(cli, ["validate", path])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_invalid_report(self, write_report):
        path = write_report(encode(_report(check_id="")))
        result = CliRunner().invoke(cli, ["validate", path])
        assert result.exit_code == 1
        assert "report is missing check ID" in result.output

    def test_nested_group(self, write_report):
        grandchild = make_vulnerability(summary="level 2")
        child = make_vulnerability(summary="level 1", vulnerabilities=[grandchild])
        path = write_report(encode(_report(make_vulnerability(vulnerabilities=[child]))))
        result = CliRunner().invoke(cli, ["validate", path])
        assert result.exit_code == 1
        assert "not allowed to have children" in result.output

    def test_undecodable_report(self, write_report):
        path = write_report(b"{oops")
        result = CliRunner().invoke(cli, ["validate", path])
        assert result.exit_code == 1
        assert "INVALID" in result.output

    def test_native_format(self, write_report):
        path = write_report(encode_native(_report()))
        assert CliRunner().invoke(cli, ["validate", path]).exit_code == 1
        result = CliRunner().invoke(cli, ["validate", path, "--format", "native"])
        assert result.exit_code == 0

    def test_format_from_config(self, write_report, tmp_path):
        path = write_report(encode_native(_report()))
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("time_format: native\n")
        result = CliRunner().invoke(cli, ["--config", str(cfg), "validate", path])
        assert result.exit_code == 0


class TestConvertCommand:
    def test_string_to_native(self, write_report):
        path = write_report(encode(_report()))
        result = CliRunner().invoke(cli, ["convert", path, "--to", "native"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["start_time"] == "2021-05-18T13:30:15Z"

    def test_native_to_string_output_file(self, write_report, tmp_path):
        path = write_report(encode_native(_report()))
        out = tmp_path / "converted.json"
        result = CliRunner().invoke(cli, ["convert", path, "--from", "native", "--to", "string", "-o", str(out)])
        assert result.exit_code == 0
        assert json.loads(out.read_text())["start_time"] == START_TIME_STR

    def test_bad_input(self, write_report):
        path = write_report(b'{"start_time": "yesterday"}')
        result = CliRunner().invoke(cli, ["convert", path, "--to", "native"])
        assert result.exit_code == 1
        assert "start_time" in result.output


class TestScoreCommand:
    def test_grade(self, write_report):
        group = make_vulnerability(
            summary="Weak TLS",
            vulnerabilities=[make_vulnerability(score=3.9), make_vulnerability(score=6.9)],
        )
        path = write_report(encode(_report(group, make_vulnerability(summary="Info"))))
        result = CliRunner().invoke(cli, ["score", path])
        assert result.exit_code == 0
        assert "Score: 6.9" in result.output
        assert "Security status: E" in result.output

    def test_no_findings(self, write_report):
        path = write_report(encode(_report()))
        result = CliRunner().invoke(cli, ["score", path])
        assert result.exit_code == 0
        assert "No findings" in result.output
        assert "Security status: A" in result.output

    def test_exit_code_with_findings(self, write_report):
        path = write_report(encode(_report(make_vulnerability(score=9.1))))
        result = CliRunner().invoke(cli, ["score", path, "--severity", "HIGH", "--exit-code"])
        assert result.exit_code == 1

    def test_exit_code_below_threshold(self, write_report):
        path = write_report(encode(_report(make_vulnerability(score=3.9))))
        result = CliRunner().invoke(cli, ["score", path, "--severity", "HIGH", "--exit-code"])
        assert result.exit_code == 0


class TestCLI:
    def test_missing_config(self, tmp_path, write_report):
        path = write_report(encode(_report()))
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "missing.yml"), "validate", path])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_help_output(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "validate" in result.output
        assert "convert" in result.output
        assert "score" in result.output
