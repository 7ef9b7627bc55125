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

import json
import logging
import sys

from .command import GoalOptimizerCmd
from kafka_goal_optimizer.analyzer.goal_optimizer import goals_in_priority_order
from kafka_goal_optimizer.cluster_model.display import display_cluster_model_stats
from kafka_goal_optimizer.cluster_model.display import display_table
from kafka_goal_optimizer.util.validation import assignment_to_plan
from kafka_goal_optimizer.util.validation import plan_to_assignment
from kafka_goal_optimizer.util.validation import validate_plan


class StatsCmd(GoalOptimizerCmd):

    def __init__(self):
        super().__init__()
        self.log = logging.getLogger(self.__class__.__name__)

    def build_subparser(self, subparsers):
        subparser = subparsers.add_parser(
            'stats',
            description='Show utilization statistics of the cluster snapshot',
            help='This command is used to display utilization and goal '
            'imbalance statistics of the cluster snapshot, or of the snapshot '
            'after given assignment is applied.',
        )
        self.add_snapshot_arguments(subparser)
        subparser.add_argument(
            '--read-from-file',
            dest='plan_file_path',
            metavar='<reassignment-plan-file-path>',
            type=str,
            help='Read the partition assignment from json file. Example format:'
            ' {"version": 1, "partitions": [{"topic": "foo", "partition": 1, '
            '"replicas": [1,2,3]}]}',
        )
        return subparser

    def run_command(self, cluster_model):
        if self.args.plan_file_path:
            base_assignment = cluster_model.assignment
            self.log.info(
                'Integrating given assignment-plan in current cluster model.'
            )
            plan = self.get_plan()
            if not validate_plan(plan, assignment_to_plan(base_assignment)):
                self.log.error(
                    'Invalid assignment plan in %s. Abort.',
                    self.args.plan_file_path,
                )
                sys.exit(1)
            assignment = dict(base_assignment)
            assignment.update(plan_to_assignment(plan))
            cluster_model.restore(assignment)
            display_cluster_model_stats(cluster_model, base_assignment)
        else:
            display_cluster_model_stats(cluster_model)
        print('')
        display_table(
            ['Priority', 'Goal', 'Satisfied', 'Imbalance'],
            [
                [
                    priority,
                    goal.name,
                    'yes' if goal.is_goal_satisfied_after_optimization(
                        cluster_model,
                        self.constraint,
                    ) else 'no',
                    '{:.4f}'.format(goal.imbalance(cluster_model, self.constraint)),
                ]
                for priority, goal in goals_in_priority_order(self.goals)
            ],
        )

    def get_plan(self):
        """Read the given json plan."""
        try:
            with open(self.args.plan_file_path) as plan_file:
                return json.load(plan_file)
        except OSError:
            self.log.exception(
                'Given json file {file} not found.'
                .format(file=self.args.plan_file_path),
            )
            raise
        except ValueError:
            self.log.exception(
                'Given json file {file} could not be decoded.'
                .format(file=self.args.plan_file_path),
            )
            raise
