"""Tests for VestingWorkbookRenderer.

This module checks that:
1. The workbook has the expected sheets and headers
2. Ledger values in the sheets match the domain calculations
3. Totals rows are SUM formulas over the allocation rows
4. The unlock schedule sheet shows unlocked shares as percentages
"""

import pathlib
import sys

REPO_ROOT = pathlib.Path(__file__).resolve().parents[3]
sys.path.insert(0, str(REPO_ROOT / "packages" / "excel" / "src"))
sys.path.insert(0, str(REPO_ROOT / "packages" / "domain"))

import pytest
from openpyxl import load_workbook

from vesting_domain import InMemoryLedger, StaticAuthorizer, VestingEngine
from vesting_domain.calendar_math import from_civil
from vesting_domain.schemas import SECONDS_PER_DAY, VestingWorkbookCFG
from vesting_excel import VestingWorkbookRenderer
from vesting_excel.workbook_renderer import format_timestamp

DAY = SECONDS_PER_DAY
START = from_civil(2024, 1, 1)


# =============================================================================
# Test Data Builders
# =============================================================================

def build_engine() -> VestingEngine:
    """Two pools: a revocable linear team pool and a paused interval advisor pool.

    - Team (ABC): 30d cliff, 10% initial, 90d linear; alice 1000 (claimed 100), bob 2000
    - Advisors (XYZ): 10% every 10 days; carol 500
    """
    now = {"t": START}
    engine = VestingEngine(
        authorizer=StaticAuthorizer(["admin"]),
        transfer=InMemoryLedger(),
        clock=lambda: now["t"],
    )
    team = engine.create_pool("admin", {
        "name": "Team",
        "asset": "ABC",
        "start": START,
        "cliff_duration": 30 * DAY,
        "initial_unlock_percent": 1000,
        "revocable": True,
        "strategy": {"type": "linear", "duration": 90 * DAY},
    })
    advisors = engine.create_pool("admin", {
        "name": "Advisors",
        "asset": "XYZ",
        "start": START,
        "strategy": {"type": "interval", "interval_length": 10 * DAY, "unlock_per_interval": 1000},
    })
    engine.add_allocations("admin", team, {"alice": 1000, "bob": 2000})
    engine.add_allocation("admin", advisors, "carol", 500)

    now["t"] = START + 30 * DAY
    engine.claim("alice", "ABC")
    engine.set_paused("admin", advisors, True)
    return engine


@pytest.fixture
def workbook(tmp_path):
    config = VestingWorkbookCFG(
        title="Test Report",
        as_of=START + 75 * DAY,
        projection_times=[START + 120 * DAY, START, START + 75 * DAY],
    )
    path = tmp_path / "vesting.xlsx"
    VestingWorkbookRenderer(build_engine(), config).render(str(path))
    return load_workbook(path)


# =============================================================================
# Structure
# =============================================================================

def test_sheet_names(workbook):
    assert workbook.sheetnames == ["Pools", "Allocations", "Unlock Schedule"]


def test_projection_sheet_omitted_without_times(tmp_path):
    path = tmp_path / "no_projection.xlsx"
    VestingWorkbookRenderer(build_engine(), VestingWorkbookCFG(as_of=START)).render(str(path))
    assert load_workbook(path).sheetnames == ["Pools", "Allocations"]


def test_titles_carry_valuation_date(workbook):
    assert workbook["Pools"]["A1"].value == "Test Report - Pools as of 2024-03-16"
    assert workbook["Allocations"]["A1"].value.endswith("as of 2024-03-16")


def test_format_timestamp():
    assert format_timestamp(0) == "1970-01-01"
    assert format_timestamp(from_civil(2024, 2, 29, 86_399)) == "2024-02-29"


# =============================================================================
# Pools Sheet
# =============================================================================

def test_pools_sheet_rows(workbook):
    sheet = workbook["Pools"]
    header = [cell.value for cell in sheet[3]]
    assert header[:5] == ["Pool", "Name", "Asset", "Strategy", "Status"]

    team = [cell.value for cell in sheet[4]]
    assert team[:6] == [0, "Team", "ABC", "linear", "Active", 2]
    # Granted, Vested, Claimed, Releasable, Remaining
    assert team[6:] == [3000, 550 + 1100, 100, 450 + 1100, 2900]

    advisors = [cell.value for cell in sheet[5]]
    assert advisors[4] == "Paused"
    assert advisors[-2] == 0  # nothing releasable while paused


# =============================================================================
# Allocations Sheet
# =============================================================================

def test_allocation_section_layout(workbook):
    sheet = workbook["Allocations"]
    assert sheet["A3"].value == "Pool 0 - Team (ABC, linear)"
    assert [cell.value for cell in sheet[4]] == [
        "Beneficiary", "Granted", "Vested", "Claimed", "Releasable", "Remaining", "Status",
    ]
    assert [cell.value for cell in sheet[5]] == ["alice", 1000, 550, 100, 450, 900, "Active"]
    assert [cell.value for cell in sheet[6]] == ["bob", 2000, 1100, 0, 1100, 2000, "Active"]


def test_totals_row_uses_sum_formulas(workbook):
    sheet = workbook["Allocations"]
    assert sheet["A7"].value == "Total"
    assert sheet["B7"].value == "=SUM(B5:B6)"
    assert sheet["F7"].value == "=SUM(F5:F6)"
    assert sheet["G7"].value is None


def test_second_pool_section(workbook):
    sheet = workbook["Allocations"]
    assert sheet["A9"].value == "Pool 1 - Advisors (XYZ, interval)"
    assert sheet["A11"].value == "carol"
    assert sheet["E11"].value == 0
    assert sheet["B12"].value == "=SUM(B11:B11)"


def test_empty_pool_totals_are_zero(tmp_path):
    engine = VestingEngine(
        authorizer=StaticAuthorizer(["admin"]),
        transfer=InMemoryLedger(),
        clock=lambda: START,
    )
    engine.create_pool("admin", {"asset": "ABC", "start": START, "strategy": {"type": "linear", "duration": DAY}})

    path = tmp_path / "empty.xlsx"
    VestingWorkbookRenderer(engine).render(str(path))
    sheet = load_workbook(path)["Allocations"]

    assert sheet["A5"].value == "Total"
    assert sheet["B5"].value == 0


# =============================================================================
# Unlock Schedule Sheet
# =============================================================================

def test_projection_columns_are_chronological(workbook):
    sheet = workbook["Unlock Schedule"]
    assert [cell.value for cell in sheet[3]] == [
        "Pool", "Strategy", "2024-01-01", "2024-03-16", "2024-04-30",
    ]


def test_projection_values_are_percentages(workbook):
    sheet = workbook["Unlock Schedule"]
    assert [cell.value for cell in sheet[4]] == ["0 - Team", "linear", 0, 0.55, 1]
    assert sheet["D4"].number_format == "0.0%"
    assert [cell.value for cell in sheet[5]][2:] == [0, 0.7, 1]
