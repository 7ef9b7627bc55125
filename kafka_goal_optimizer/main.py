# Copyright 2016 Yelp Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
from __future__ import annotations

import argparse
import configparser
import logging
import sys
from logging.config import fileConfig

from kafka_goal_optimizer import __version__
from kafka_goal_optimizer.cmds.plan import PlanCmd
from kafka_goal_optimizer.cmds.stats import StatsCmd
from kafka_goal_optimizer.cmds.verify import VerifyCmd

_log = logging.getLogger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the arguments."""
    parser = argparse.ArgumentParser(
        description='Plan replica movements of a Kafka cluster snapshot '
        'satisfying a prioritized list of balancing goals.',
    )
    parser.add_argument(
        '-v',
        '--version',
        action='version',
        version="%(prog)s {}".format(__version__),
    )
    parser.add_argument(
        '--logconf',
        type=str,
        help='Path to logging configuration file. Default: log to console.',
    )

    subparsers = parser.add_subparsers(dest='subcommand')
    subparsers.required = True
    PlanCmd().add_subparser(subparsers)
    VerifyCmd().add_subparser(subparsers)
    StatsCmd().add_subparser(subparsers)

    return parser.parse_args(argv)


def exception_logger(exc_type, exc_value, exc_traceback):
    """Log unhandled exceptions"""
    if not issubclass(exc_type, KeyboardInterrupt):  # do not log Ctrl-C
        _log.critical(
            "Uncaught exception:",
            exc_info=(exc_type, exc_value, exc_traceback)
        )
    sys.__excepthook__(exc_type, exc_value, exc_traceback)


def configure_logging(log_conf: str | None = None, log_unhandled_exceptions: bool = True) -> None:
    if log_conf:
        try:
            fileConfig(log_conf, disable_existing_loggers=False)
        except configparser.NoSectionError:
            logging.basicConfig(level=logging.INFO)
            _log.error(
                'Failed to load {logconf} file.'
                .format(logconf=log_conf),
            )
    else:
        logging.basicConfig(level=logging.INFO)
    if log_unhandled_exceptions:
        sys.excepthook = exception_logger


def run(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    configure_logging(args.logconf)

    args.command(args)
