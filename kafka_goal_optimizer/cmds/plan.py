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
from kafka_goal_optimizer.analyzer.error import GoalConsistencyError
from kafka_goal_optimizer.analyzer.error import OptimizationFailure
from kafka_goal_optimizer.analyzer.goal_optimizer import GoalOptimizer
from kafka_goal_optimizer.cluster_model.display import display_cluster_model_stats
from kafka_goal_optimizer.cluster_model.display import display_goal_report
from kafka_goal_optimizer.util import broker_id_list
from kafka_goal_optimizer.util.error import ConfigurationError
from kafka_goal_optimizer.util.validation import assignment_to_plan
from kafka_goal_optimizer.util.validation import movements_to_dicts
from kafka_goal_optimizer.util.validation import validate_plan


class PlanCmd(GoalOptimizerCmd):

    def __init__(self):
        super().__init__()
        self.log = logging.getLogger(self.__class__.__name__)

    def build_subparser(self, subparsers):
        subparser = subparsers.add_parser(
            'plan',
            description='Compute a reassignment plan satisfying the goals.',
            help='This command runs the goals in priority order on the cluster '
            'snapshot and prints the resulting reassignment plan. Replicas '
            'hosted on dead brokers are always moved away.',
        )
        self.add_snapshot_arguments(subparser)
        subparser.add_argument(
            '--exclude-brokers',
            type=broker_id_list,
            default=[],
            metavar='<broker-ids>',
            help='Comma separated ids of brokers that must not receive '
            'replicas.',
        )
        subparser.add_argument(
            '--write-to-file',
            dest='proposed_plan_file',
            metavar='<reassignment-plan-file-path>',
            type=str,
            help='Write the partition reassignment plan to a json file.',
        )
        subparser.add_argument(
            '--show-movements',
            action='store_true',
            help='Print the ordered list of replica movements.',
        )
        return subparser

    def run_command(self, cluster_model):
        base_assignment = cluster_model.assignment
        try:
            result = GoalOptimizer(self.constraint).optimizations(
                cluster_model,
                self.goals,
                self.args.exclude_brokers,
            )
        except (OptimizationFailure, GoalConsistencyError) as e:
            self.log.error('Optimization failed (%s): %s', e.state.value, e)
            sys.exit(1)
        except ConfigurationError as e:
            self.log.error('%s', e)
            sys.exit(1)

        display_goal_report(result.goal_reports)
        print('')
        display_cluster_model_stats(cluster_model, base_assignment)

        if not result.proposals:
            self.log.info('Cluster already satisfies the goals. No actions to perform.')
            return

        if not validate_plan(
            result.plan,
            assignment_to_plan(base_assignment),
            [broker.id for broker in cluster_model.dead_brokers()],
        ):
            self.log.error('Invalid proposed plan. Abort.')
            sys.exit(1)

        if self.args.show_movements:
            print('')
            print(json.dumps(movements_to_dicts(result.movements), indent=2))
        if self.args.proposed_plan_file:
            self.log.info(
                'Storing proposed-plan in %s',
                self.args.proposed_plan_file,
            )
            self.write_json_plan(result.plan, self.args.proposed_plan_file)
        self.log.info(
            'Proposed plan assignment %s',
            result.plan,
        )
        self.log.info(
            'Proposed-plan actions count: %s, replica movements: %s',
            len(result.plan['partitions']),
            len(result.movements),
        )
