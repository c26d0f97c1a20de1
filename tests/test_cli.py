"""Tests for the command line interface"""
import json
import sys

import pytest
from click.testing import CliRunner

from phenocompare.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for var in ("HPO_PATH", "NUM_GROUPS", "GROUP_NAMES", "MAX_WORKERS", "GROUPING", "GENE_GROUPS_PATH"):
        monkeypatch.delenv(var, raising=False)
    return str(tmp_path / "config.json")


@pytest.fixture
def cohorts(tmp_path, write_patient):
    group_a = tmp_path / "groupA"
    group_b = tmp_path / "groupB"
    write_patient(group_a, "a1", ["HP:0001250"], genes=["PEX1"])
    write_patient(group_a, "a2", ["HP:0002373"], genes=["PEX7"])
    write_patient(group_b, "b1", ["HP:0000234"])
    return group_a, group_b


def test_compare_writes_table(runner, tmp_path, obo_file, cohorts, config_file):
    out = tmp_path / "counts.txt"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "-o", str(out), "--hpo", str(obo_file), "--no-progress", "-w", "1",
    ])

    assert result.exit_code == 0, result.output
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "HP:0000001\tAll\tgroupA: 2\tgroupB: 1"
    assert "HP:0001250\tSeizure\tgroupA: 2\tgroupB: 0" in lines


def test_compare_custom_names_and_format(runner, tmp_path, obo_file, cohorts, config_file):
    out = tmp_path / "counts.csv"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "-o", str(out), "--hpo", str(obo_file), "--no-progress",
        "--names", "cases,controls", "-f", "csv", "-w", "2",
    ])

    assert result.exit_code == 0, result.output
    header = out.read_text(encoding="utf-8").splitlines()[0]
    assert header == "term_id,label,cases,controls"


def test_compare_uses_configured_ontology(runner, tmp_path, obo_file, cohorts, config_file):
    with open(config_file, "w") as f:
        json.dump({"hpo_path": str(obo_file)}, f)
    out = tmp_path / "counts.txt"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "-o", str(out), "--no-progress",
    ])

    assert result.exit_code == 0, result.output
    assert out.exists()


def test_compare_without_ontology(runner, tmp_path, cohorts, config_file):
    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "-o", str(tmp_path / "counts.txt"), "--no-progress",
    ])

    assert result.exit_code == 1
    assert "hpo_path" in result.output


def test_compare_wrong_number_of_groups(runner, tmp_path, obo_file, cohorts, config_file):
    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]),
        "-o", str(tmp_path / "counts.txt"), "--hpo", str(obo_file),
    ])

    assert result.exit_code == 2
    assert "Expected 2 group directories" in result.output


def test_compare_unknown_term(runner, tmp_path, obo_file, cohorts, write_patient, config_file):
    write_patient(cohorts[1], "b2", ["HP:9999999"])
    out = tmp_path / "counts.txt"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "-o", str(out), "--hpo", str(obo_file), "--no-progress",
    ])

    assert result.exit_code == 1
    assert "HP:9999999" in result.output
    assert not out.exists()


def test_compare_empty_group(runner, tmp_path, obo_file, cohorts, config_file):
    empty = tmp_path / "empty"
    empty.mkdir()
    out = tmp_path / "counts.txt"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(empty),
        "-o", str(out), "--hpo", str(obo_file), "--no-progress",
    ])

    assert result.exit_code == 1
    assert "Empty group" in result.output
    assert not out.exists()


def test_compare_by_gene_groups(runner, tmp_path, obo_file, cohorts, config_file):
    genes = tmp_path / "genes.tsv"
    genes.write_text("PEX1\tPEX6\nPEX7\n", encoding="utf-8")
    out = tmp_path / "counts.txt"

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]),
        "--gene-groups", str(genes), "-o", str(out), "--hpo", str(obo_file), "--no-progress",
    ])

    assert result.exit_code == 0, result.output
    lines = out.read_text(encoding="utf-8").splitlines()
    assert "HP:0001250\tSeizure\tearly: 1\tlate: 1" in lines
    assert "HP:0002373\tFebrile seizure\tearly: 0\tlate: 1" in lines


def test_ic_command(runner, tmp_path, config_file):
    hpoa = tmp_path / "phenotype.hpoa"
    hpoa.write_text(
        "database_id\tdisease_name\tqualifier\thpo_id\n"
        "OMIM:1\tone\t\tHP:0001250\n"
        "OMIM:2\ttwo\t\tHP:0000234\n",
        encoding="utf-8",
    )
    out = tmp_path / "ic.tsv"

    result = runner.invoke(cli, ["--config", config_file, "ic", str(hpoa), "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert [line.split("\t")[0] for line in out.read_text().splitlines()] == ["HP:0000234", "HP:0001250"]


def test_config_set_and_get(runner, config_file):
    result = runner.invoke(cli, ["--config", config_file, "config", "set", "max_workers", "3"])
    assert result.exit_code == 0, result.output

    with open(config_file) as f:
        assert json.load(f)["max_workers"] == 3

    result = runner.invoke(cli, ["--config", config_file, "config", "get", "max_workers"])
    assert "max_workers = 3" in result.output


def test_config_set_rejects_non_numeric(runner, config_file):
    result = runner.invoke(cli, ["--config", config_file, "config", "set", "num_groups", "two"])
    assert result.exit_code == 1


def test_config_show_raw(runner, config_file):
    result = runner.invoke(cli, ["--config", config_file, "config", "show", "--raw"])
    assert result.exit_code == 0
    assert "num_groups" in result.output


def test_config_show_sources(runner, config_file):
    with open(config_file, "w") as f:
        json.dump({"hpo_path": "/data/hp.obo"}, f)

    result = runner.invoke(cli, ["--config", config_file, "config", "show"])

    assert result.exit_code == 0, result.output

    def row(key):
        return next(line for line in result.output.splitlines() if key in line.split())

    assert "config file" in row("hpo_path")
    assert "default" in row("max_workers")
    assert "default" in row("num_groups")


def test_gene_grouping_rejects_two_directories_before_parsing(runner, tmp_path, obo_file, cohorts,
                                                              config_file, monkeypatch):
    genes = tmp_path / "genes.tsv"
    genes.write_text("PEX1\nPEX7\n", encoding="utf-8")

    def fail(*args, **kwargs):
        raise AssertionError("ontology parsed")

    monkeypatch.setattr(sys.modules["phenocompare.cli.main"], "parse_obo", fail)

    result = runner.invoke(cli, [
        "--config", config_file, "compare", str(cohorts[0]), str(cohorts[1]),
        "--gene-groups", str(genes), "-o", str(tmp_path / "counts.txt"),
        "--hpo", str(obo_file), "--no-progress",
    ])

    assert result.exit_code == 2
    assert "exactly one patient directory" in result.output
