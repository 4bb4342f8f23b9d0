"""Test configuration for the NHANES explorer."""

from pathlib import Path
import sys

import pandas as pd
import pytest


# Ensure the local packages are importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

SURVEY_CSV = """ID,Gender,Age,AgeDecade,Race1,Education,Weight,Height,BMI,BMI_WHO,BPSysAve,BPDiaAve,TotChol,Diabetes,SmokeNow
1,female,30,30-39,White,College Grad,60,165,20,18.5_to_24.9,110,70,4.5,No,No
2,female,40,40-49,Black,High School,65,163,22,18.5_to_24.9,120,75,5.0,No,Yes
3,male,50,50-59,White,Some College,90,180,NA,NA,130,80,5.5,Yes,No
3,male,50,50-59,White,Some College,90,180,NA,NA,130,80,5.5,Yes,No
4,female,12,10-19,Mexican,NA,40,150,17.8,12.0_18.5,100,60,NA,No,NA
5,NA,70,70+,Other,8th Grade,70,170,24,18.5_to_24.9,140,85,6.0,Yes,NA
"""


@pytest.fixture
def survey_df() -> pd.DataFrame:
    """Small survey frame in explorer column names."""
    return pd.DataFrame(
        {
            "ID": ["1", "2", "3", "4", "5", "6", "7"],
            "Age": [10.0, 18.0, 30.0, 45.0, 65.0, 70.0, 50.0],
            "Gender": ["female", "female", "male", "female", None, "male", "female"],
            "Race": ["White", "Black", "White", "Mexican", "Other", "White", "Black"],
            "Education": [None, "High School", "College Grad", "Some College", "8th Grade", "High School", None],
            "BMI": [17.0, 20.0, 31.0, 22.0, 25.0, None, 24.0],
            "DiabetesStatus": ["No", "No", "Yes", "No", "Yes", "No", None],
            "TotalCholesterol": [4.0, 4.5, 5.5, None, 6.0, 5.0, 5.2],
        }
    )


@pytest.fixture
def survey_csv(tmp_path: Path) -> Path:
    """Write a tiny NHANES-style CSV (source column names) and return its path."""
    path = tmp_path / "nhanes.csv"
    path.write_text(SURVEY_CSV, encoding="utf-8")
    return path
