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

import math

from .distribution_goal import DistributionGoal
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint


def count_window(total: int, brokers: int, constraint: BalancingConstraint) -> tuple[int, int]:
    """Window of replica counts around total / brokers, rounded outward so
    that an even spread always fits in it.
    """
    if not brokers:
        return 0, 0
    low, high = constraint.balance_limits(total / brokers)
    return math.floor(low), math.ceil(high)


class ReplicaDistributionGoal(DistributionGoal):
    """Balance the number of replicas across the alive brokers."""

    def _broker_value(self, broker, dimension):
        return broker.replica_count

    def _replica_value(self, replica):
        return 1

    def _limits(self, cluster_model, constraint, dimension):
        return count_window(
            cluster_model.total_replica_count,
            len(cluster_model.alive_brokers()),
            constraint,
        )

    def _window(self, broker, limits):
        return limits
