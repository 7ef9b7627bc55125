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
import json
import logging
import sys
from typing import Any

from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.analyzer.goals import DEFAULT_GOAL_PRIORITIES
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.snapshot import load_snapshot
from kafka_goal_optimizer.util.config import OptimizerConfiguration
from kafka_goal_optimizer.util.error import GoalOptimizerError


class GoalOptimizerCmd:
    """Interface used by all kafka-goal-optimizer commands
    The attributes args, constraint and goals are initialized on run().
    """

    log = logging.getLogger("GoalOptimizer")

    def __init__(self) -> None:
        self.args: argparse.Namespace | None = None
        self.constraint: BalancingConstraint | None = None
        self.goals: dict[int, str] = dict(DEFAULT_GOAL_PRIORITIES)

    def build_subparser(self, subparsers: Any) -> argparse.ArgumentParser:
        """Build the command subparser.

        :param subparsers: argpars subparsers
        :returns: subparser
        """
        raise NotImplementedError("Implement in subclass")

    def run_command(self, cluster_model: ClusterModel) -> None:
        """Implement the command logic.
        When run_command is called args, constraint and goals are already
        initialized.
        """
        raise NotImplementedError("Implement in subclass")

    def run(self, args: argparse.Namespace) -> None:
        """Load configuration and snapshot then call run_command."""
        self.args = args
        try:
            if args.config:
                config = OptimizerConfiguration(args.config)
                self.constraint = BalancingConstraint.from_config(
                    dict(config.balancing_constraint),
                )
                if config.goals:
                    self.goals = config.goals
            else:
                self.constraint = BalancingConstraint()
            self.log.debug(
                'Starting %s with %s and goals %s',
                self.__class__.__name__,
                self.constraint,
                self.goals,
            )
            cluster_model = load_snapshot(args.snapshot)
        except GoalOptimizerError as e:
            self.log.error('%s', e)
            sys.exit(1)
        if len(cluster_model.partitions) == 0:
            self.log.info("The cluster is empty. No actions to perform.")
            return
        self.run_command(cluster_model)

    def add_subparser(self, subparsers: Any) -> None:
        self.build_subparser(subparsers).set_defaults(command=self.run)

    @staticmethod
    def add_snapshot_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            '--snapshot',
            metavar='<snapshot-file-path>',
            type=str,
            required=True,
            help='Json file describing brokers, partitions and their load.',
        )
        subparser.add_argument(
            '--config',
            metavar='<config-file-path>',
            type=str,
            help='Yaml file with the balancing constraint and the goal '
            'priorities. Default: built-in constraint and every goal.',
        )

    def write_json_plan(self, proposed_layout: Any, proposed_plan_file: str) -> None:
        """Dump proposed json plan to given output file for future usage."""
        with open(proposed_plan_file, 'w') as output:
            json.dump(proposed_layout, output)
