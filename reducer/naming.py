"""
File naming shared with the map phase and the final merge.
"""

import os


def _check_index(name: str, value: int):
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")


def reduce_name(job_name: str, map_task: int, reduce_task: int, directory: str = None) -> str:
    """Name of the intermediate file map task `map_task` wrote for `reduce_task`."""
    _check_index('map_task', map_task)
    _check_index('reduce_task', reduce_task)
    name = f"mrtmp.{job_name}-{map_task}-{reduce_task}"
    return os.path.join(directory, name) if directory else name


def merge_name(job_name: str, reduce_task: int, directory: str = None) -> str:
    """Name of the output file the merge stage expects from `reduce_task`."""
    _check_index('reduce_task', reduce_task)
    name = f"mrtmp.{job_name}-res-{reduce_task}"
    return os.path.join(directory, name) if directory else name
