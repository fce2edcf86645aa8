"""
Contains functions used to tabulate a batch of RCV contests.
"""

from typing import Dict, List, Tuple, Type

import abc
import collections
import copy
import datetime
import json
import logging
import os
import pathlib
import re
import shutil

import pandas as pd
import tqdm

import rcv_tally
from rcv_tally import util
from rcv_tally.package_types import ElectionDict, Path, RawBallot
from rcv_tally.parsers import get_parser_dict
from rcv_tally.rcv.base import RCV
from rcv_tally.tabulation import get_rcv_class
from rcv_tally.validate import has_duplicates, validate_election

_log = logging.getLogger(__name__)


def _validate_election(election: ElectionDict) -> List[RawBallot]:
    return validate_election(election["candidates"], election["ballots"])


def _new_rcv_contest(rcv_type: Type[RCV], election: ElectionDict, ballots: List[RawBallot]) -> RCV:
    """
    Construct the rcv variant, which tabulates the contest
    """
    return rcv_type(election["candidates"], ballots)


def _contest_uid(name: str) -> str:
    """File name safe version of the contest name."""
    uid = re.sub(r"[^\w\-]+", "_", name.strip()).strip("_")
    if not uid:
        raise RuntimeError(f"contest name {name!r} cannot be used as a file name")
    return uid


# typecast functions
def _cast_str(s):
    """
    If string-in-string '"0006"', return '0006'
    If 'None', return None
    else, return str() result
    """
    s = str(s)
    if len(s) > 1 and ((s[0] == '"' and s[-1] == '"') or (s[0] == "'" and s[-1] == "'")):
        return s[1:-1]
    elif s == "None":
        return None
    else:
        return s


def _cast_bool(s):
    if isinstance(s, bool):
        return s
    if str(s).strip().title() == "True":
        return True
    if str(s).strip().title() == "False":
        return False
    raise RuntimeError(f'invalid value ({s}), must be "true" or "false"')


def _cast_parser(s):
    parser_dict = get_parser_dict()
    if s not in parser_dict:
        raise RuntimeError(f"unknown parser_func {s!r}, must be one of {sorted(parser_dict)}")
    return parser_dict[s]


def _cast_rcv(s):
    return get_rcv_class(s)


cast_dict = {
    "str": _cast_str,
    "bool": _cast_bool,
    "parser": _cast_parser,
    "rcv": _cast_rcv,
}


def _read_settings(fname: str) -> Dict:
    settings_fpath = pathlib.Path(os.path.dirname(__file__)) / fname
    if os.path.isfile(settings_fpath) is False:
        raise RuntimeError(f"(developer error) Looking for {fname}. Not a valid file path: {settings_fpath}")

    with open(settings_fpath) as settings_file:
        return json.load(settings_file)


def _read_contest_set(contest_set_path: Path, override_cvr_root_dir: Path = None) -> Tuple[List[Dict], Dict]:
    """Read contest_set.csv and run_config.json from the contest set directory.

    :param contest_set_path: Directory containing contest_set.csv and run_config.json
    :param override_cvr_root_dir: If provided, used in place of run_config's cvr_path_root
    :raises RuntimeError: if either file is missing or a value cannot be read
    :return: the contests to tabulate and the run configuration
    :rtype: Tuple[List[Dict], Dict]
    """

    contest_set_path = pathlib.Path(contest_set_path)

    # settings/defaults
    contest_set_settings = _read_settings("contest_set_settings.json")
    run_config_settings = _read_settings("run_config_settings.json")

    # read run_config.json
    run_config_fpath = contest_set_path / "run_config.json"
    if os.path.isfile(run_config_fpath) is False:
        raise RuntimeError(f"not a valid file path: {run_config_fpath}")

    with open(run_config_fpath) as run_config_file:
        run_config = json.load(run_config_file)

    for field in list(run_config):
        if field not in run_config_settings:
            _log.warning('"%s" is an unrecognized option in run_config.json, it will be ignored.', field)
            del run_config[field]

    # add in defaults for missing options
    for field in run_config_settings:
        if field not in run_config:
            run_config[field] = run_config_settings[field]["default"]
        run_config[field] = cast_dict[run_config_settings[field]["type"]](run_config[field])

    cvr_path_root = pathlib.Path(override_cvr_root_dir or run_config["cvr_path_root"])
    if not cvr_path_root.is_absolute():
        cvr_path_root = contest_set_path / cvr_path_root
    run_config["cvr_path_root"] = cvr_path_root

    # read contest_set.csv
    contest_set_fpath = contest_set_path / "contest_set.csv"
    if os.path.isfile(contest_set_fpath) is False:
        raise RuntimeError(f"not a valid file path: {contest_set_fpath}")

    contest_set_df = pd.read_csv(contest_set_fpath, dtype=object)

    for required_col in ("name", "cvr_path"):
        if required_col not in contest_set_df.columns:
            raise RuntimeError(f'{contest_set_fpath} is missing required column "{required_col}"')

    # add in default values for missing columns
    for setting in contest_set_settings:
        if setting not in contest_set_df.columns:
            contest_set_df[setting] = contest_set_settings[setting]["default"]

    # fill in na values with defaults and cast column
    for col in contest_set_df.columns:
        if col not in contest_set_settings:
            _log.warning('"%s" is an unrecognized column in contest_set.csv, it will be ignored.', col)
            contest_set_df = contest_set_df.drop(columns=col)
        else:
            contest_set_df[col] = contest_set_df[col].fillna(contest_set_settings[col]["default"])
            contest_set_df[col] = [
                cast_dict[contest_set_settings[col]["type"]](i) for i in contest_set_df[col].tolist()
            ]

    # convert df to listOdicts, one dict per row
    contests = contest_set_df.to_dict("records")

    valid_contests = []
    for contest in contests:

        if contest["ignore_contest"]:
            _log.info("ignoring contest: %s", contest["name"])
            continue

        copy_contest = copy.copy(contest)
        copy_contest["uid"] = _contest_uid(contest["name"])
        copy_contest["cvr_path"] = cvr_path_root / contest["cvr_path"]
        del copy_contest["ignore_contest"]

        valid_contests.append(copy_contest)

    uids = [c["uid"] for c in valid_contests]
    if has_duplicates(uids):
        raise RuntimeError(f"contest names in {contest_set_fpath} must be unique")

    # store file locations
    run_config["contest_set_file_path"] = contest_set_fpath
    run_config["run_config_file_path"] = run_config_fpath

    return valid_contests, run_config


class _Steps(abc.ABC):
    """
    Runs a contest's steps in order. A step runs once its condition holds and the steps it
    depends on succeeded. A failed step is written to the error logs and the steps that
    depend on it are skipped.
    """

    def __init__(self, contest, output_config, results_dir, pbar_desc):

        self.contest = contest
        self.output_config = output_config
        self.results_dir = results_dir
        self.pbar_desc = pbar_desc
        self.error_log_writers = []

        self.state_data = {"n_errors": 0}
        self.steps = collections.OrderedDict()

    def update_error_log_writers(self, writers_list):
        self.error_log_writers = writers_list if isinstance(writers_list, list) else [writers_list]

    def refresh_steps(self):
        """Regenerate the steps so their args see the latest state, keeping progress."""
        success = {k: step["success"] for k, step in self.steps.items()}
        self.steps = self.generate_steps()
        for k, step in self.steps.items():
            step["success"] = success.get(k)

    @abc.abstractmethod
    def generate_steps(self):
        pass

    def n_steps(self):
        return len(self.steps)

    def next_step(self):

        remaining_steps = [
            (k, step)
            for k, step in self.steps.items()
            if step["success"] is None  # step not attempted yet
            and step["condition"]  # step conditions are met
            and all(self.steps[dep_k]["success"] for dep_k in step["depends_on"])  # all step dependencies are met
        ]

        if not remaining_steps:
            return False
        return remaining_steps[0]

    def run_steps(self):

        self.state_data["n_errors"] = 0

        self.steps = collections.OrderedDict()
        self.refresh_steps()

        pbar = tqdm.tqdm(
            total=self.n_steps(),
            bar_format="{l_bar}{bar}|{postfix}",
            colour="GREEN",
        )
        pbar.set_description(self.pbar_desc)

        next_step = self.next_step()
        while next_step:

            step_name, step_details = next_step

            try:

                pbar.set_postfix_str(step_name)

                if step_details["return_key"]:
                    self.state_data[step_details["return_key"]] = step_details["f"](*step_details["args"])
                else:
                    step_details["f"](*step_details["args"])

            except Exception as e:

                self.steps[step_name]["success"] = False
                _log.debug("contest %s, step %s failed", self.contest["uid"], step_name, exc_info=True)

                for writer in self.error_log_writers:
                    writer.write([self.contest["uid"], step_name, repr(e)])
                self.state_data["n_errors"] += 1

            else:
                self.steps[step_name]["success"] = True

            finally:
                pbar.update(1)

            self.refresh_steps()
            next_step = self.next_step()

        pbar.set_postfix_str("complete")
        pbar.close()

    def return_results(self):
        return self.state_data


class _TallySteps(_Steps):
    def generate_steps(self):

        contest = self.contest
        uid = contest["uid"]
        rcv_obj = self.state_data.get("rcv_object")

        def write_step(f, toggle):
            return {
                "f": f,
                "args": [rcv_obj, self.results_dir, uid],
                "condition": self.output_config.get(toggle),
                "depends_on": ["init_rcv"],
                "return_key": None,
            }

        return collections.OrderedDict(
            [
                (
                    "read_cvr",
                    {
                        "f": contest["parser_func"],
                        "args": [contest["cvr_path"]],
                        "condition": True,
                        "depends_on": [],
                        "return_key": "election",
                    },
                ),
                (
                    "validate",
                    {
                        "f": _validate_election,
                        "args": [self.state_data.get("election")],
                        "condition": True,
                        "depends_on": ["read_cvr"],
                        "return_key": "ballots",
                    },
                ),
                (
                    "init_rcv",
                    {
                        "f": _new_rcv_contest,
                        "args": [contest["rcv_type"], self.state_data.get("election"), self.state_data.get("ballots")],
                        "condition": True,
                        "depends_on": ["validate"],
                        "return_key": "rcv_object",
                    },
                ),
                ("round_by_round_table", write_step(RCV.write_round_by_round_table, "round_by_round_table")),
                ("round_by_round_json", write_step(RCV.write_round_by_round_json, "round_by_round_json")),
                ("candidate_outcomes", write_step(RCV.write_candidate_outcomes, "candidate_outcomes")),
                ("rank_usage", write_step(RCV.write_rank_usage_table, "rank_usage")),
                (
                    "stats",
                    {
                        "f": rcv_obj.get_stats if rcv_obj is not None else None,
                        "args": [],
                        "condition": self.output_config.get("summary"),
                        "depends_on": ["init_rcv"],
                        "return_key": "stats_df",
                    },
                ),
            ]
        )


def _write_input_dir(results_dir: pathlib.Path, run_config: Dict, start_time, end_time) -> None:

    # copy input files
    result_log_dir = results_dir / "inputs"
    util.verifyDir(result_log_dir)

    with open(result_log_dir / "pkg_info.txt", "w") as pkg_info:
        pkg_info.write(f"version: {rcv_tally.__version__}\n")
        pkg_info.write(f'start_time: {start_time.strftime("%Y-%m-%d %H:%M:%S")}\n')
        pkg_info.write(f'end_time: {end_time.strftime("%Y-%m-%d %H:%M:%S")}')

    shutil.copy2(run_config["run_config_file_path"], result_log_dir / "run_config.json")
    shutil.copy2(run_config["contest_set_file_path"], result_log_dir / "contest_set.csv")


def _tally_contest_set(contest_set: List[Dict], run_config: Dict, path_to_output: Path, fresh_output=False) -> int:
    """Tabulate every contest and write the configured outputs.

    :return: number of errors recorded in the error log
    :rtype: int
    """

    start_time = datetime.datetime.now()

    ##################
    # OUTPUT PATHS
    results_dir = pathlib.Path(path_to_output) / "results"
    if fresh_output and results_dir.exists():
        _log.info("deleting existing results directory: %s", results_dir)
        shutil.rmtree(results_dir)
    util.verifyDir(results_dir)

    stats_dfs = []

    # init logger
    error_logger = util.CSVLogger(results_dir / "error_log.csv", ["contest", "tally_step", "message"])

    n_errors = 0
    #########################
    # LOOP THROUGH CONTESTS

    try:
        for idx, contest in enumerate(contest_set):

            pbar_desc = f'{idx+1} of {len(contest_set)} contests: {contest["name"]}'
            if n_errors:
                pbar_desc = f"[{n_errors} ERRORS SO FAR] " + pbar_desc

            steps = _TallySteps(contest, run_config, results_dir, pbar_desc)
            steps.update_error_log_writers([error_logger])
            steps.run_steps()

            tally_returns = steps.return_results()
            n_errors += tally_returns["n_errors"]

            rcv_obj = tally_returns.get("rcv_object")
            if rcv_obj is not None:
                _log.info("%s: winners %s", contest["name"], list(rcv_obj.get_result().winners))

            # STORE RESULTS
            if tally_returns.get("stats_df") is not None:
                stats_df = tally_returns["stats_df"]
                stats_df.insert(0, "contest", contest["name"])
                stats_dfs.append(stats_df)
    finally:
        error_logger.close()

    if n_errors:
        _log.warning("%d total errors, see %s", n_errors, error_logger.path)

    # WRITE OUT AGGREGATED STATS
    if run_config.get("summary") and stats_dfs:
        pd.concat(stats_dfs, axis=0, ignore_index=True, sort=False).to_csv(results_dir / "summary.csv", index=False)

    end_time = datetime.datetime.now()
    _write_input_dir(results_dir, run_config, start_time, end_time)

    _log.info("runtime duration: %s", end_time - start_time)
    return n_errors


def analyze_election_set(contest_set_path: Path, output_path: Path, fresh_output=False) -> int:
    """
    Tabulate a set of contests.

    :param contest_set_path: Directory containing two files: contest_set.csv, which lists the contests to tabulate, and run_config.json, which selects the outputs to write.
    :type contest_set_path: Union[str, pathlib.Path]
    :param output_path: Directory where the results/ directory will be written.
    :type output_path: Union[str, pathlib.Path]
    :param fresh_output: If True, a results/ directory already present in `output_path` is deleted first, defaults to False
    :type fresh_output: bool, optional
    :return: number of errors written to results/error_log.csv
    :rtype: int
    """

    # read in contest set info
    contest_set, run_config = _read_contest_set(contest_set_path)

    # tabulate contests
    return _tally_contest_set(contest_set, run_config, output_path, fresh_output=fresh_output)
