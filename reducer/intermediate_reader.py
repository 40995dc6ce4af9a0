"""
Intermediate Reader
Reads the partition file every map task wrote for one reduce task and
concatenates the decoded records into a single working set.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from reducer.config import MissingInputPolicy
from reducer.errors import MissingIntermediateError
from reducer.naming import reduce_name
from reducer.records import DecodeStats, KeyValue, decode_stream

logger = logging.getLogger(__name__)


@dataclass
class ReadReport:
    """Outcome of reading every partition file of one reduce task"""
    files_opened: int = 0
    missing_files: List[str] = field(default_factory=list)
    records_read: int = 0
    records_skipped: int = 0


class IntermediateReader:
    """Reads the intermediate partition files of a single reduce task"""

    def __init__(self, job_name: str, reduce_task: int, n_map: int, directory: str = None,
                 missing_input: MissingInputPolicy = MissingInputPolicy.SKIP):
        """
        Initialize the reader

        Args:
            job_name: Name of the whole MapReduce job
            reduce_task: Index of the reduce task whose partition is read
            n_map: Number of map tasks that were run
            directory: Directory holding the intermediate files (cwd if None)
            missing_input: Policy for partition files that cannot be opened
        """
        if n_map < 0:
            raise ValueError(f"n_map must be >= 0, got {n_map}")
        self.job_name = job_name
        self.reduce_task = reduce_task
        self.n_map = n_map
        self.directory = directory
        self.missing_input = missing_input
        self.report = ReadReport()

    def partition_paths(self) -> List[str]:
        """Paths of the partition files for this reduce task, one per map task"""
        return [reduce_name(self.job_name, map_task, self.reduce_task, self.directory)
                for map_task in range(self.n_map)]

    def read_all(self) -> List[KeyValue]:
        """
        Read and merge every partition file

        Returns:
            Unordered working set of all decoded records

        Raises:
            MissingIntermediateError: If a file cannot be opened under the FAIL policy
        """
        self.report = ReadReport()
        working_set = []
        for path in self.partition_paths():
            working_set.extend(self.read_partition(path))

        logger.info(
            f"Reduce task {self.reduce_task}: Read {self.report.files_opened}/{self.n_map} files, "
            f"{self.report.records_read} records, skipped {self.report.records_skipped} malformed records"
        )
        return working_set

    def read_partition(self, path: str) -> List[KeyValue]:
        """Decode one partition file, applying the missing-input policy if it cannot be opened."""
        try:
            f = open(path, 'r', encoding='utf-8', errors='replace')
        except OSError as e:
            if self.missing_input is MissingInputPolicy.FAIL:
                logger.error(f"Reduce task {self.reduce_task}: Cannot open {path}: {e.strerror}")
                raise MissingIntermediateError(path, e.strerror or str(e)) from e
            logger.warning(f"Reduce task {self.reduce_task}: Cannot open {path}, treating partition as empty: {e.strerror}")
            self.report.missing_files.append(path)
            return []

        stats = DecodeStats()
        with f:
            records = list(decode_stream(f, source=path, stats=stats))

        self.report.files_opened += 1
        self.report.records_read += stats.decoded
        self.report.records_skipped += stats.skipped
        return records
