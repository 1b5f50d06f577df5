import pathlib

from constants.constants import REPORT_FILE_EXTENSION
from utils.file_utils import write_bytes_atomically
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger

logger = get_logger("Report Store")


class BaseReportStore(object):
    """Where rendered reports live between runs."""

    def exists(self, dao_name: str, governor_address: str, proposal_id: int) -> bool:
        raise NotImplementedError()

    def save(self, dao_name: str, governor_address: str, proposal_id: int, content: bytes) -> str:
        raise NotImplementedError()


class FileReportStore(BaseReportStore):
    """Stores reports as <reports_dir>/<dao>/<governor>/<proposal id>.json."""

    def __init__(self, reports_dir: str, extension: str = REPORT_FILE_EXTENSION):
        self.reports_dir = pathlib.Path(reports_dir)
        self.extension = extension

    def path_for(self, dao_name: str, governor_address: str, proposal_id: int) -> pathlib.Path:
        return (
            self.reports_dir
            / dao_name
            / to_normalized_address(governor_address)
            / f"{proposal_id}{self.extension}"
        )

    def exists(self, dao_name: str, governor_address: str, proposal_id: int) -> bool:
        return self.path_for(dao_name, governor_address, proposal_id).is_file()

    def save(self, dao_name: str, governor_address: str, proposal_id: int, content: bytes) -> str:
        path = self.path_for(dao_name, governor_address, proposal_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        write_bytes_atomically(path, content)
        logger.info(f"Report written to {path}")
        return str(path)
