import pandas as pd
import pytest


@pytest.fixture
def design_dict():
    return {
        "cohortDefs": [
            {"cohortId": 1, "cohortName": "Target A"},
            {"cohortId": 2, "cohortName": "Target B"},
            {"cohortId": 100, "cohortName": "Outcome X"},
            {"cohortId": 200, "cohortName": "Outcome Y"},
        ],
        "targetDefs": [{"id": 1, "name": "Target A"}, {"id": 2, "name": "Target B"}],
        "outcomeDefs": [
            {"id": 10, "name": "Outcome X", "cohortId": 100, "cleanWindow": 9999},
            {"id": 20, "name": "Outcome Y", "cohortId": 200, "cleanWindow": 0, "excludeCohortId": 1},
        ],
        "timeAtRiskDefs": [
            {"id": 1, "start": {"dateField": "start", "offset": 0}, "end": {"dateField": "end", "offset": 0}},
        ],
        "analysisList": [
            {"targets": [1, 2], "outcomes": [10], "tars": [1]},
            {"targets": [1], "outcomes": [10, 20], "tars": [1]},
        ],
        "strataSettings": {"byAge": False, "byGender": True, "byYear": False},
    }


@pytest.fixture
def incidence_summary():
    return pd.DataFrame(
        {
            "TARGET_COHORT_DEFINITION_ID": [1, 1, 2, 2],
            "OUTCOME_ID": [10, 20, 10, 10],
            "PERSONS_AT_RISK_PE": [100, 4, 0, 50],
            "PERSONS_AT_RISK": [90, 3, 0, 10],
            "PERSON_OUTCOMES_PE": [12, 1, 0, 6],
            "PERSON_OUTCOMES": [11, 1, 0, 3],
            "OUTCOMES_PE": [15, 2, 0, 5],
            "OUTCOMES": [14, 2, 0, 3],
            "INCIDENCE_PROPORTION_P100P": [12.2, 33.3, None, 30.0],
            "INCIDENCE_RATE_P100PY": [5.1, 40.0, None, 12.5],
        }
    )


@pytest.fixture
def job_context(design_dict, tmp_path):
    return {
        "settings": {"irDesign": design_dict},
        "sharedResources": [{"cohortDefinitionSharedResources": []}],
        "moduleExecutionSettings": {
            "connectionDetails": {"dbms": "bigquery", "project": "demo-project", "location": "US"},
            "workDatabaseSchema": "work_ds",
            "cohortTableNames": {"cohortTable": "my_cohort"},
            "cdmDatabaseSchema": "cdm_ds",
            "databaseId": "DB1",
            "resultsSubFolder": str(tmp_path / "results"),
            "minCellCount": 5,
            "refId": 7,
            "resultsConnectionDetails": {"dbms": "bigquery", "project": "results-project"},
            "resultsDatabaseSchema": "results_ds",
        },
    }
