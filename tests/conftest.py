"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import sys
import json
import tempfile
import shutil

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def write_partition(temp_dir):
    """Write an intermediate partition file for (job, map task, reduce task)"""
    def _write(job_name, map_task, reduce_task, pairs=(), raw_lines=()):
        path = os.path.join(temp_dir, f"mrtmp.{job_name}-{map_task}-{reduce_task}")
        with open(path, 'w') as f:
            for key, value in pairs:
                f.write(json.dumps({'Key': key, 'Value': value}) + '\n')
            for line in raw_lines:
                f.write(line + '\n')
        return path
    return _write


@pytest.fixture
def read_output():
    """Read an output file back as a list of (key, value) tuples"""
    def _read(path):
        with open(path) as f:
            return [(r['Key'], r['Value']) for r in map(json.loads, f)]
    return _read


@pytest.fixture
def wordcount_job_file():
    """Path to word count example job file"""
    return os.path.join(PROJECT_ROOT, 'examples', 'wordcount.py')


@pytest.fixture
def inverted_index_job_file():
    """Path to inverted index example job file"""
    return os.path.join(PROJECT_ROOT, 'examples', 'inverted_index.py')
