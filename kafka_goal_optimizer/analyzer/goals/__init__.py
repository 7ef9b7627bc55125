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
"""The closed set of goals the optimizer knows about.

Goals are referred to by class name in configuration, optionally prefixed
by a dotted path (``com.example.RackAwareGoal`` resolves to RackAwareGoal).
"""
from __future__ import annotations

from collections import OrderedDict

from .capacity_goal import CpuCapacityGoal
from .capacity_goal import DiskCapacityGoal
from .capacity_goal import NetworkInboundCapacityGoal
from .capacity_goal import NetworkOutboundCapacityGoal
from .goal import Goal
from .potential_nw_out_goal import PotentialNwOutGoal
from .rack_aware_goal import RackAwareGoal
from .replica_capacity_goal import ReplicaCapacityGoal
from .replica_distribution_goal import ReplicaDistributionGoal
from .resource_distribution_goal import CpuUsageDistributionGoal
from .resource_distribution_goal import DiskUsageDistributionGoal
from .resource_distribution_goal import NetworkInboundUsageDistributionGoal
from .resource_distribution_goal import NetworkOutboundUsageDistributionGoal
from .topic_replica_distribution_goal import TopicReplicaDistributionGoal
from kafka_goal_optimizer.util.error import UnknownGoalError


GOALS: dict[str, type[Goal]] = OrderedDict(
    (goal_class.__name__, goal_class)
    for goal_class in (
        RackAwareGoal,
        ReplicaCapacityGoal,
        CpuCapacityGoal,
        DiskCapacityGoal,
        NetworkInboundCapacityGoal,
        NetworkOutboundCapacityGoal,
        PotentialNwOutGoal,
        DiskUsageDistributionGoal,
        NetworkInboundUsageDistributionGoal,
        NetworkOutboundUsageDistributionGoal,
        CpuUsageDistributionGoal,
        TopicReplicaDistributionGoal,
        ReplicaDistributionGoal,
    )
)

# Hard goals first, then the distribution goals
DEFAULT_GOAL_PRIORITIES: dict[int, str] = OrderedDict(
    (priority, name) for priority, name in enumerate(GOALS, start=1)
)


def goal_by_name(name: str) -> Goal:
    """Return a new instance of the goal called name.

    :raises: UnknownGoalError if no goal matches name.
    """
    class_name = name.strip().rsplit('.', 1)[-1]
    try:
        return GOALS[class_name]()
    except KeyError:
        raise UnknownGoalError(
            "Unknown goal {name}. Known goals: {goals}".format(
                name=name,
                goals=', '.join(GOALS),
            )
        )


__all__ = ['DEFAULT_GOAL_PRIORITIES', 'GOALS', 'Goal', 'goal_by_name'] + list(GOALS)
