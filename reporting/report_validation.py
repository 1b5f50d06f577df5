from typing import Iterable

from reporting.models.proposal_report import ProposalReport
from utils.exceptions import ReportIncomplete


def validate_report_completeness(report: ProposalReport, enabled_check_ids: Iterable[str]) -> None:
    """
    Raises ReportIncomplete unless the report carries a result for exactly the enabled
    checks and one non-empty description per proposal action, in action order.
    """
    expected = list(enabled_check_ids)
    actual = list(report.check_results)
    if actual != expected:
        missing = [check_id for check_id in expected if check_id not in report.check_results]
        extra = [check_id for check_id in actual if check_id not in expected]
        raise ReportIncomplete(
            f"Proposal {report.formatted_proposal_id}: check results do not match the enabled checks "
            f"(missing: {missing}, unexpected: {extra}, order: {actual})"
        )

    action_count = report.proposal.action_count
    if len(report.decoded_actions) != action_count:
        raise ReportIncomplete(
            f"Proposal {report.formatted_proposal_id}: {len(report.decoded_actions)} decoded actions "
            f"for {action_count} proposal actions"
        )

    for position, action in enumerate(report.decoded_actions):
        if action.index != position:
            raise ReportIncomplete(
                f"Proposal {report.formatted_proposal_id}: decoded action {action.index} found at position {position}"
            )
        if not action.prose.strip():
            raise ReportIncomplete(f"Proposal {report.formatted_proposal_id}: action {position} has no description")
