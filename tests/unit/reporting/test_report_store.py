import orjson
import pytest

from checks.check_types import CheckResult
from decoding.models.decoded_action import DecodedAction
from governance.enums.governor_type import GovernorType
from governance.enums.simulation_type import SimulationType
from governance.models.block import BlockSnapshot
from reporting.models.proposal_report import ProposalReport, ReportBlocks
from reporting.report_renderer import JsonReportRenderer
from reporting.report_store import FileReportStore
from reporting.report_validation import validate_report_completeness
from tests.unit.factories import GOVERNOR_ADDRESS, TOKEN_ADDRESS, build_proposal
from utils.exceptions import ReportIncomplete


def _report(check_ids=("checkSimulationSucceeds", "checkLogs"), actions=None) -> ProposalReport:
    proposal = build_proposal(7)
    if actions is None:
        actions = (DecodedAction(index=0, target=TOKEN_ADDRESS, prose="Transfer 1.00 USDC."),)
    return ProposalReport(
        dao_name="Compound",
        governor_address=GOVERNOR_ADDRESS,
        governor_type=GovernorType.BRAVO,
        proposal_id=7,
        formatted_proposal_id="7",
        proposal=proposal,
        sim_type=SimulationType.PROPOSED,
        simulation_success=True,
        check_results={check_id: CheckResult(check_id=check_id, name=check_id) for check_id in check_ids},
        decoded_actions=tuple(actions),
        blocks=ReportBlocks(current=BlockSnapshot(number=100, timestamp=1_700_000_000)),
    )


def test_report_path(tmp_path):
    store = FileReportStore(str(tmp_path))

    path = store.path_for("Compound", GOVERNOR_ADDRESS.lower(), 7)

    assert path == tmp_path / "Compound" / GOVERNOR_ADDRESS / "7.json"
    assert store.exists("Compound", GOVERNOR_ADDRESS, 7) is False


def test_json_renderer_writes_report(tmp_path):
    store = FileReportStore(str(tmp_path))

    location = JsonReportRenderer(store).render(_report())

    assert store.exists("Compound", GOVERNOR_ADDRESS, 7)
    with open(location, "rb") as file_handle:
        content = orjson.loads(file_handle.read())
    assert content["proposal_id"] == 7
    assert list(content["check_results"]) == ["checkSimulationSucceeds", "checkLogs"]
    assert content["decoded_actions"][0]["prose"] == "Transfer 1.00 USDC."
    assert not list(tmp_path.rglob("*.tmp"))


def test_complete_report_passes_validation():
    validate_report_completeness(_report(), ["checkSimulationSucceeds", "checkLogs"])


@pytest.mark.parametrize(
    "enabled",
    [
        ["checkSimulationSucceeds"],
        ["checkSimulationSucceeds", "checkLogs", "checkStateChanges"],
        ["checkLogs", "checkSimulationSucceeds"],
    ],
)
def test_check_result_mismatch_is_incomplete(enabled):
    with pytest.raises(ReportIncomplete):
        validate_report_completeness(_report(), enabled)


def test_missing_action_is_incomplete():
    with pytest.raises(ReportIncomplete):
        validate_report_completeness(_report(actions=()), ["checkSimulationSucceeds", "checkLogs"])


def test_misplaced_action_is_incomplete():
    actions = (DecodedAction(index=1, target=TOKEN_ADDRESS, prose="Transfer"),)

    with pytest.raises(ReportIncomplete):
        validate_report_completeness(_report(actions=actions), ["checkSimulationSucceeds", "checkLogs"])
