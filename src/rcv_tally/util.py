import csv
import decimal
import logging
import os
import pathlib

_log = logging.getLogger(__name__)

###############################################################
# constants

NAN = decimal.Decimal("NaN")

########################
# helper funcs


class CSVLogger:
    def __init__(self, path, header_list):
        self.row_length = len(header_list)
        self.path = pathlib.Path(path)
        self.file = open(self.path, "w", newline="")
        self.writer = csv.writer(self.file, delimiter=",", quotechar='"', quoting=csv.QUOTE_ALL)
        self.lines_added = None
        self.write(header_list)
        self.lines_added = False

    def write(self, row_list):
        if len(row_list) != self.row_length:
            msg = f"CSVLogger.write ({self.path.name}) row list has length {len(row_list)}, "
            msg += f"doesn't match header list length ({self.row_length})"
            raise RuntimeError(msg)
        self.writer.writerow(row_list)
        self.file.flush()
        if self.lines_added is not None and not self.lines_added:
            self.lines_added = not self.lines_added

    def close(self):
        self.file.flush()
        self.file.close()


def percent(count: int, total: int) -> int:
    """Whole percentage of `count` out of `total`, rounded half up.

    Integer arithmetic only, so 1/8 is 13 and 2/3 is 67. Returns 0 when total is 0.
    """
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def verifyDir(dir_path, make_if_missing=True, error_msg_tail="is not an existing folder"):
    """
    Check that a directory exists and if missing, either error or create it.

    :param dir_path: directory path to verify
    :param make_if_missing: if True, create directory if missing
    :param error_msg_tail: if make_if_missing is False and directory missing,
     raise with this error message after the dir_path.
    """
    if os.path.isdir(dir_path) is False:
        if make_if_missing:
            _log.info("Creating directory at: %s", dir_path)
            os.makedirs(dir_path)
        else:
            raise RuntimeError(f"{dir_path} {error_msg_tail}")
