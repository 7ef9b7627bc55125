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

import logging
import sys

from .command import GoalOptimizerCmd
from kafka_goal_optimizer.analyzer.optimization_verifier import execute_goals_for


class VerifyCmd(GoalOptimizerCmd):

    def __init__(self):
        super().__init__()
        self.log = logging.getLogger(self.__class__.__name__)

    def build_subparser(self, subparsers):
        subparser = subparsers.add_parser(
            'verify',
            description='Check that the goals improve the cluster snapshot.',
            help='This command runs the goals on the cluster snapshot and '
            'exits with status 1 unless dead brokers end up empty, every hard '
            'goal is satisfied and no soft goal gets worse.',
        )
        self.add_snapshot_arguments(subparser)
        return subparser

    def run_command(self, cluster_model):
        if execute_goals_for(self.constraint, cluster_model, self.goals):
            print('Optimization verified: the goals improve the cluster.')
        else:
            print('Optimization failed to improve the cluster.')
            sys.exit(1)
