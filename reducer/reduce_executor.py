"""
Reduce Task Executor
Runs one reduce task: reads the intermediate partition of every map task,
sorts the merged records by key, applies the reduce function to each key
group, and writes the reduced records to the task's output file.
"""

import time
import logging
from dataclasses import dataclass, field, asdict
from typing import List

import psutil

from reducer.config import MissingInputPolicy, OutputMode, ReduceSettings
from reducer.errors import ReduceTaskError
from reducer.function_loader import FunctionLoader
from reducer.grouping import ReduceFunction, group_by_key, reduce_groups, sort_records
from reducer.intermediate_reader import IntermediateReader
from reducer.output_writer import OutputWriter

logger = logging.getLogger(__name__)


@dataclass
class ReduceReport:
    """What one reduce task read, dropped and wrote"""
    job_name: str
    reduce_task: int
    output_path: str
    files_opened: int = 0
    missing_files: List[str] = field(default_factory=list)
    records_read: int = 0
    records_skipped: int = 0
    keys_reduced: int = 0
    records_written: int = 0
    execution_time_ms: int = 0
    memory_usage_bytes: int = 0

    @property
    def complete(self) -> bool:
        """True when every partition file was read and no record was skipped"""
        return not self.missing_files and self.records_skipped == 0

    def to_dict(self) -> dict:
        """Result dict with 'success', 'execution_time_ms' and 'error_message' plus the counters"""
        result = asdict(self)
        result['success'] = True
        result['complete'] = self.complete
        if self.complete:
            result['error_message'] = ''
        else:
            result['error_message'] = (
                f"{len(self.missing_files)} partition files missing, "
                f"{self.records_skipped} malformed records skipped"
            )
        return result


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, job_name: str, reduce_task: int, out_file: str, n_map: int,
                 reduce_fn: ReduceFunction, directory: str = None,
                 missing_input: MissingInputPolicy = None, output_mode: OutputMode = None,
                 settings: ReduceSettings = None):
        """
        Initialize the reduce executor

        Args:
            job_name: Name of the whole MapReduce job
            reduce_task: Index of this reduce task
            out_file: Path the reduced records are written to
            n_map: Number of map tasks that were run
            reduce_fn: User function (key, values) -> str
            directory: Directory of the intermediate files
            missing_input: Policy for unreadable partition files
            output_mode: How the output file is opened
            settings: Defaults for the options above, read from the environment if None
        """
        if reduce_task < 0:
            raise ValueError(f"reduce_task must be >= 0, got {reduce_task}")
        if n_map < 0:
            raise ValueError(f"n_map must be >= 0, got {n_map}")
        if settings is None:
            settings = ReduceSettings.from_env()

        self.job_name = job_name
        self.reduce_task = reduce_task
        self.out_file = out_file
        self.n_map = n_map
        self.reduce_fn = reduce_fn
        self.directory = directory if directory is not None else settings.intermediate_dir
        self.missing_input = missing_input or settings.missing_input
        self.output_mode = output_mode or settings.output_mode
        self.process = psutil.Process()

    @classmethod
    def from_job_file(cls, job_name: str, reduce_task: int, out_file: str, n_map: int,
                      job_file: str, **kwargs) -> 'ReduceExecutor':
        """Build an executor whose reduce function comes from a user job file."""
        reduce_fn = FunctionLoader(job_file).get_reduce_function()
        return cls(job_name, reduce_task, out_file, n_map, reduce_fn, **kwargs)

    def get_memory_usage(self) -> int:
        """Get current memory usage in bytes."""
        return self.process.memory_info().rss

    def execute(self) -> ReduceReport:
        """
        Execute the reduce task

        Returns:
            ReduceReport with the read, skip and write counts

        Raises:
            MissingIntermediateError: If a partition file is unreadable under the FAIL policy
            ReduceFunctionError: If the reduce function fails for some key
            OutputUnwritableError: If the output file cannot be opened
        """
        start_time = time.time()
        report = ReduceReport(self.job_name, self.reduce_task, self.out_file)

        logger.info(f"Reduce task {self.reduce_task}: Starting job {self.job_name} with {self.n_map} map outputs")
        try:
            reader = IntermediateReader(self.job_name, self.reduce_task, self.n_map,
                                        directory=self.directory, missing_input=self.missing_input)
            working_set = reader.read_all()
            # Peak RSS over samples taken after each stage
            peak_memory = self.get_memory_usage()

            ordered = sort_records(working_set)
            peak_memory = max(peak_memory, self.get_memory_usage())
            reduced = reduce_groups(group_by_key(ordered), self.reduce_fn)
            peak_memory = max(peak_memory, self.get_memory_usage())
            logger.info(f"Reduce task {self.reduce_task}: Reduced {len(ordered)} records into {len(reduced)} keys")

            written = OutputWriter(self.out_file, self.output_mode).write(reduced)
            peak_memory = max(peak_memory, self.get_memory_usage())
        except ReduceTaskError as e:
            logger.error(f"Reduce task failed - Job: {self.job_name}, Task: {self.reduce_task}. Error: {e}")
            raise

        read_report = reader.report
        report.files_opened = read_report.files_opened
        report.missing_files = list(read_report.missing_files)
        report.records_read = read_report.records_read
        report.records_skipped = read_report.records_skipped
        report.keys_reduced = len(reduced)
        report.records_written = written
        report.memory_usage_bytes = peak_memory
        report.execution_time_ms = int((time.time() - start_time) * 1000)

        if report.complete:
            logger.info(f"Reduce task {self.reduce_task}: Completed in {report.execution_time_ms}ms")
        else:
            logger.warning(
                f"Reduce task {self.reduce_task}: Completed with partial input in {report.execution_time_ms}ms "
                f"({len(report.missing_files)} missing files, {report.records_skipped} skipped records)"
            )
        return report


def do_reduce(job_name: str, reduce_task: int, out_file: str, n_map: int,
              reduce_fn: ReduceFunction, **kwargs) -> ReduceReport:
    """
    Run one reduce task.

    Keyword arguments are passed to ReduceExecutor (directory, missing_input,
    output_mode, settings).
    """
    return ReduceExecutor(job_name, reduce_task, out_file, n_map, reduce_fn, **kwargs).execute()
