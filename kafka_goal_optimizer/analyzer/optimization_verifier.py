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
"""Run an optimization and check that the resulting placement improves on
the one it started from.
"""
from __future__ import annotations

import logging

from .balancing_constraint import BalancingConstraint
from .goal_optimizer import goals_in_priority_order
from .goal_optimizer import GoalOptimizer
from .goal_optimizer import OptimizerResult
from .goals import Goal
from .goals.goal import BALANCE_TOLERANCE
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.util.error import GoalOptimizerError


_log = logging.getLogger(__name__)


def execute_goals_for(
    constraint: BalancingConstraint,
    cluster_model: ClusterModel,
    goals_by_priority: dict[int, Goal | str],
) -> bool:
    """Optimize cluster_model and return True if the result is a genuine
    improvement.

    The run is an improvement when the optimizer succeeds, no dead broker
    hosts replicas any more, every hard goal is satisfied and no soft goal
    ends with a higher imbalance than the placement it was handed. A soft
    goal may still end worse than before the run when goals of higher
    priority degraded it, to evacuate dead brokers for instance. It is
    compared with GoalReport.imbalance_before, the imbalance those goals
    left.
    """
    try:
        goals = goals_in_priority_order(goals_by_priority)
        result = GoalOptimizer(constraint).optimizations(
            cluster_model,
            dict(goals),
        )
    except GoalOptimizerError as e:
        _log.error("Optimization failed: %s", e)
        return False
    return verify_result(constraint, cluster_model, goals, result)


def verify_result(
    constraint: BalancingConstraint,
    cluster_model: ClusterModel,
    goals: list[tuple[int, Goal]],
    result: OptimizerResult,
) -> bool:
    """Check the optimized cluster model against every goal, in priority
    order.
    """
    loaded_dead_brokers = [
        broker.id for broker in cluster_model.dead_brokers()
        if not broker.empty()
    ]
    if loaded_dead_brokers:
        _log.error("Dead brokers %s still host replicas", loaded_dead_brokers)
        return False

    reports = {report.name: report for report in result.goal_reports}
    for _, goal in goals:
        if goal.is_hard_goal:
            if not goal.is_goal_satisfied_after_optimization(cluster_model, constraint):
                _log.error("Hard goal %s is not satisfied", goal.name)
                return False
            continue
        imbalance = goal.imbalance(cluster_model, constraint)
        imbalance_before = reports[goal.name].imbalance_before
        if imbalance > imbalance_before + BALANCE_TOLERANCE:
            _log.error(
                "Soft goal %s regressed: imbalance %s, was %s before it ran",
                goal.name,
                imbalance,
                imbalance_before,
            )
            return False
    return True
