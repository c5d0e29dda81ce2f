"""Tests for CSV export helpers."""
import pandas as pd

from cohort_incidence_module.export import write_result_tables, write_results_data_model, write_table


def test_write_table_writes_without_index(tmp_path):
    path = write_table(pd.DataFrame({"a": [1, 2]}), tmp_path, "t.csv")
    assert path.read_text(encoding="utf-8").splitlines() == ["a", "1", "2"]


def test_write_result_tables_prefixes_and_tags_summary(tmp_path, incidence_summary):
    tables = {"incidence_summary": incidence_summary, "tar_def": pd.DataFrame({"TAR_ID": [1]})}
    paths = write_result_tables(tables, tmp_path, "ci_", "DB9")

    assert [p.name for p in paths] == ["ci_incidence_summary.csv", "ci_tar_def.csv"]
    summary = pd.read_csv(paths[0])
    assert (summary["database_id"] == "DB9").all()
    assert "database_id" not in pd.read_csv(paths[1]).columns
    # Caller's frame is left alone.
    assert "database_id" not in incidence_summary.columns


def test_write_results_data_model_prefixes_table_names(tmp_path):
    spec = pd.DataFrame({"table_name": ["incidence_summary"], "column_name": ["outcomes"]})
    path = write_results_data_model(spec, tmp_path, "ci_")
    assert path.name == "resultsDataModelSpecification.csv"
    assert pd.read_csv(path)["table_name"].tolist() == ["ci_incidence_summary"]
