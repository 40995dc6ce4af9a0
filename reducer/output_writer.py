"""
Output Writer
Writes the reduced records of one reduce task in the intermediate record format
so the merge stage can decode them the same way.
"""

import os
import logging
import tempfile
from typing import Iterable

from reducer.config import OutputMode
from reducer.errors import OutputUnwritableError
from reducer.records import KeyValue, write_records

logger = logging.getLogger(__name__)


_FILE_MODE = 0o666


def _default_mode() -> int:
    """Permission bits open() would give a new file under the current umask"""
    umask = os.umask(0)
    os.umask(umask)
    return _FILE_MODE & ~umask


class OutputWriter:
    """Writes reduced records to a single output file"""

    def __init__(self, path: str, mode: OutputMode = OutputMode.APPEND):
        """
        Args:
            path: Output file path; its directory must already exist
            mode: APPEND keeps existing content, TRUNCATE replaces it,
                  ATOMIC writes a temp file and renames it over the path
        """
        self.path = path
        self.mode = mode

    def write(self, records: Iterable[KeyValue]) -> int:
        """
        Write records in the given order

        Returns:
            Number of records written

        Raises:
            OutputUnwritableError: If the output cannot be opened or created
        """
        if self.mode is OutputMode.ATOMIC:
            count = self._write_atomic(records)
        else:
            file_mode = 'a' if self.mode is OutputMode.APPEND else 'w'
            try:
                f = open(self.path, file_mode, encoding='utf-8')
            except OSError as e:
                logger.error(f"Cannot open output file {self.path}: {e}")
                raise OutputUnwritableError(self.path, e.strerror or str(e)) from e
            with f:
                count = write_records(f, records)

        logger.info(f"Wrote {count} records to {self.path} ({self.mode.value})")
        return count

    def _write_atomic(self, records: Iterable[KeyValue]) -> int:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{os.path.basename(self.path)}.", suffix='.tmp'
            )
        except OSError as e:
            logger.error(f"Cannot create temp file for {self.path}: {e}")
            raise OutputUnwritableError(self.path, e.strerror or str(e)) from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                count = write_records(f, records)
                # mkstemp creates 0600; match APPEND/TRUNCATE output
                os.chmod(tmp_path, _default_mode())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            _discard(tmp_path)
            logger.error(f"Cannot replace {self.path}: {e}")
            raise OutputUnwritableError(self.path, e.strerror or str(e)) from e
        except BaseException:
            _discard(tmp_path)
            raise
        return count


def _discard(path: str):
    if os.path.exists(path):
        os.remove(path)
