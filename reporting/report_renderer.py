import orjson

from reporting.models.proposal_report import ProposalReport
from reporting.report_store import BaseReportStore


class BaseReportRenderer(object):
    def render(self, report: ProposalReport) -> str:
        """Renders and persists the report, returning where it was written."""
        raise NotImplementedError()


class JsonReportRenderer(BaseReportRenderer):
    def __init__(self, store: BaseReportStore):
        self.store = store

    @staticmethod
    def to_json(report: ProposalReport) -> bytes:
        return orjson.dumps(report.model_dump(mode="json"), option=orjson.OPT_INDENT_2)

    def render(self, report: ProposalReport) -> str:
        return self.store.save(report.dao_name, report.governor_address, report.proposal_id, self.to_json(report))
