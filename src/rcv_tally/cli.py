"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -mrcv_tally` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``rcv_tally.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``rcv_tally.__main__`` in ``sys.modules``.
"""
import argparse
import logging
import os

from rcv_tally.batch import analyze_election_set


def main(argv=None):

    # argument parse and valid
    p = argparse.ArgumentParser(description='Tabulate instant runoff (ranked choice) contests.')

    p.add_argument('contest_set_path', help="Path to directory containing contest_set.csv and run_config.json.")
    p.add_argument('--output_path', help='By default all output will be written to contest_set_path, '
                                         'provide this argument to specify an alternative.')
    p.add_argument('--fresh', action='store_true',
                   help='Delete the existing results/ directory located in the output path')
    p.add_argument('--verbose', action='store_true', help='Log per round details.')

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    contest_set_path = os.path.abspath(args.contest_set_path)
    if not os.path.isdir(contest_set_path):
        raise RuntimeError(f'invalid path [contest_set_path]: {contest_set_path}')

    output_path = os.path.abspath(args.output_path) if args.output_path else contest_set_path
    if not os.path.isdir(output_path):
        raise RuntimeError(f'invalid path [output_path]: {output_path}')

    n_errors = analyze_election_set(contest_set_path, output_path, fresh_output=args.fresh)

    return 1 if n_errors else 0
