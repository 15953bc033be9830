"""Diagnostic log files collected during a run and written at the end of it."""

import logging
from collections.abc import Iterator
from pathlib import Path

from topicsdk.errors import TopicSdkError

logger = logging.getLogger(__name__)


class RunLog:
    """An output log file.

    A log is only written to disk if it contains entries. A log with headers
    writes them as its first line; otherwise the first line is ``// <label>``.
    """

    def __init__(
        self,
        label: str,
        filename: str,
        headers: list[str] | None = None,
        header_delimiter: str = "|",
        is_error: bool = False,
    ) -> None:
        """Initialize an empty log."""
        self.label = label
        self.filename = filename
        self.headers = headers
        self.header_delimiter = header_delimiter
        self.is_error = is_error
        self.entries: list[str] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> str:
        return self.entries[index]

    @property
    def format_string(self) -> str | None:
        """Format string joining one placeholder per header, or None."""
        if self.headers is None:
            return None
        return self.header_delimiter.join(
            "{" + str(i) + "}" for i in range(len(self.headers))
        )

    def add(self, line: str) -> None:
        """Append a preformatted line."""
        self.entries.append(line)

    def add_entry(self, *values: object) -> None:
        """Add one entry built from as many values as the log has headers.

        A log without headers takes exactly one value.
        """
        if not values:
            msg = f"Log.add_entry on {self.filename} was called with no values."
            raise TopicSdkError(msg)

        fmt = self.format_string
        if fmt is not None:
            if len(values) != len(self.headers or []):
                msg = (
                    f"Log.add_entry on {self.filename} got {len(values)} values; "
                    f"pass as many values as the log has headers."
                )
                raise TopicSdkError(msg)
            self.entries.append(fmt.format(*values))
            return

        if len(values) != 1:
            msg = f"Log.add_entry on {self.filename} needs exactly one value."
            raise TopicSdkError(msg)
        self.entries.append(str(values[0]))

    def write(self, directory: Path) -> Path | None:
        """Replace any previous copy of the log file; write it if non-empty."""
        path = directory / self.filename
        delete_file_if_exists(path)
        if not self.entries:
            return None

        first_line = (
            self.header_delimiter.join(self.headers)
            if self.headers is not None
            else f"// {self.label}"
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "\n".join([first_line, *self.entries]) + "\n", encoding="utf-8"
        )
        return path


def delete_file_if_exists(path: Path) -> None:
    """Delete a stale output file; a file that can't be removed is fatal."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        msg = f"I can't refresh the file {path}: {e}. Please close it if you have it open."
        raise TopicSdkError(msg) from e


class LogRegistry:
    """Holds the built-in logs plus any logs registered by callers."""

    def __init__(self, log_dir: Path) -> None:
        """Create the built-in logs."""
        self.log_dir = log_dir
        self.files_saved = RunLog("Files saved.", "FilesSaved_Log.txt")
        self.file_save_errors = RunLog(
            "File save errors.", "FileSaveErrors_Log.txt", is_error=True
        )
        self.nonexistent_rids = RunLog(
            "Non-existent topic rids found in mapping file(s).",
            "NonexistentRidInMappingFile_Log.txt",
            is_error=True,
        )
        self.malformed_mappings = RunLog(
            "Malformed mappings (should be two comma-separated values).",
            "MalformedMappings_Log.txt",
            is_error=True,
        )
        self.duplicated_mappings = RunLog(
            "Duplicated mappings.", "DuplicatedMappings_Log.txt", is_error=True
        )
        self.duped_win32_names = RunLog(
            "Duped Win32 API names.", "DupedWin32ApiNames_Log.txt", is_error=True
        )
        self.logs: list[RunLog] = [
            self.nonexistent_rids,
            self.malformed_mappings,
            self.duplicated_mappings,
            self.duped_win32_names,
        ]

    def register(self, log: RunLog) -> None:
        """Register a log to be written and announced at the end of the run."""
        self.logs.append(log)

    def output_files_saved_log(self, dry_run: bool) -> None:
        """Print the first saved file and write the full list if there are more."""
        delete_file_if_exists(self.log_dir / self.files_saved.filename)
        print("===FILES SAVED (DRYRUN)===" if dry_run else "=======FILES SAVED========")

        if self.files_saved:
            print(self.files_saved[0])
        elif dry_run:
            print("***None***")
        else:
            logger.warning("No files saved. This was not a dry-run and it was a no-op.")

        if len(self.files_saved) > 1:
            path = self.files_saved.write(self.log_dir)
            print(f"For the rest, see {path}")

        if self._output_log(self.file_save_errors):
            if dry_run:
                logger.warning("Make files writable if you want to save them.")
            else:
                logger.warning("There are file save errors.")

    def output_other_logs(self) -> bool:
        """Write every registered non-empty log. Returns True if any was written."""
        print("\n===========LOGS===========")
        wrote_any = False
        for log in self.logs:
            wrote_any = self._output_log(log) or wrote_any
        if not wrote_any:
            print("***No logs***")
        return wrote_any

    def _output_log(self, log: RunLog) -> bool:
        path = log.write(self.log_dir)
        if path is None:
            return False
        if log.is_error:
            logger.error("See %s", path)
        else:
            print(f"See {path}")
        return True
