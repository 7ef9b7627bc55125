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
from collections import OrderedDict
from collections.abc import Iterable
from typing import NamedTuple

from .balancing_constraint import BalancingConstraint
from .error import GoalConsistencyError
from .error import OptimizationFailure
from .error import OptimizerState
from .goals import Goal
from .goals import goal_by_name
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement
from kafka_goal_optimizer.util.error import InvalidConfigurationError
from kafka_goal_optimizer.util.validation import assignment_to_plan
from kafka_goal_optimizer.util.validation import PlanDict


# Upper bound of the passes over the goal list
MAX_OPTIMIZATION_PASSES = 20


class GoalReport(NamedTuple):
    """Outcome of a single goal of the run.

    imbalance_before is the imbalance of the placement the goal was handed,
    the last time a goal of higher priority had changed it. From then on
    only the goal itself and the goals of lower priority move replicas, and
    they may not increase that imbalance.
    """
    priority: int
    name: str
    is_hard_goal: bool
    satisfied: bool
    movement_count: int
    imbalance_before: float
    imbalance_after: float


class OptimizerResult(NamedTuple):
    """Outcome of a successful optimization run.

    :param state: terminal state of the run
    :param movements: ordered action list leading to the proposed placement
    :param goal_reports: one report per goal, in priority order
    :param proposals: final replica list of every partition whose placement
        changed
    :param plan: proposals as a Kafka reassignment plan
    """
    state: OptimizerState
    movements: list[ReplicaMovement]
    goal_reports: list[GoalReport]
    proposals: dict[tuple[str, int], list[int]]
    plan: PlanDict

    @property
    def violated_goals(self) -> list[str]:
        return [report.name for report in self.goal_reports if not report.satisfied]


def goals_in_priority_order(goals_by_priority: dict[int, Goal | str]) -> list[tuple[int, Goal]]:
    """Sort the goal priority map by ascending priority, resolving goal names.

    :raises: InvalidConfigurationError if a priority is not an integer or a
        goal appears twice.
    :raises: UnknownGoalError for unknown goal names.
    """
    if not goals_by_priority:
        raise InvalidConfigurationError("At least one goal is required")
    for priority in goals_by_priority:
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise InvalidConfigurationError(
                f"Goal priority must be an integer, got {priority!r}",
            )
    goals = [
        (priority, goal_by_name(goal) if isinstance(goal, str) else goal)
        for priority, goal in sorted(goals_by_priority.items(), key=lambda item: item[0])
    ]
    names = [goal.name for _, goal in goals]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise InvalidConfigurationError(
            "Goals listed more than once: {}".format(', '.join(duplicates)),
        )
    return goals


class GoalOptimizer:
    """Apply goals to a cluster model in priority order.

    Each goal runs on the placement left by the goals before it, and has to
    keep the state they reached. The moves of a goal that fails are rolled
    back so that the model reflects the last successful goal.

    The moves of a goal can open new improvements for the goals of higher
    priority, so the whole goal list is run again until a pass moves no
    replica. Running the optimizer on its own output then proposes nothing.

    :param constraint: thresholds shared by every goal of the run.
    """

    def __init__(self, constraint: BalancingConstraint) -> None:
        self.constraint = constraint
        self.log = logging.getLogger(self.__class__.__name__)

    def optimizations(
        self,
        cluster_model: ClusterModel,
        goals_by_priority: dict[int, Goal | str],
        excluded_brokers: Iterable[int] | None = None,
    ) -> OptimizerResult:
        """Optimize the cluster model in place.

        :param cluster_model: model of the cluster, mutated in place
        :param goals_by_priority: dict priority: goal (or goal name), lower
            priorities run first
        :param excluded_brokers: ids of the brokers that must not receive
            any replica
        :raises: OptimizationFailure when a goal is infeasible
        :raises: GoalConsistencyError when a goal breaks an already
            satisfied goal
        """
        goals = goals_in_priority_order(goals_by_priority)
        excluded = frozenset(excluded_brokers or ())
        initial_assignment = cluster_model.assignment
        movements: list[ReplicaMovement] = []
        movement_counts = [0] * len(goals)
        imbalances_before = [0.0] * len(goals)
        # A goal is disturbed when a goal of higher priority moved replicas
        # since its last run. Its reference imbalance is taken again then.
        disturbed = [True] * len(goals)

        for pass_number in range(1, MAX_OPTIMIZATION_PASSES + 1):
            pass_movement_count = 0
            for index, (priority, goal) in enumerate(goals):
                if disturbed[index]:
                    imbalances_before[index] = goal.imbalance(cluster_model, self.constraint)
                    disturbed[index] = False
                goal_movements = self._optimize_goal(
                    cluster_model,
                    priority,
                    goal,
                    [higher for _, higher in goals[:index]],
                    excluded,
                    pass_number,
                )
                if goal_movements:
                    for lower in range(index + 1, len(goals)):
                        disturbed[lower] = True
                movement_counts[index] += len(goal_movements)
                movements.extend(goal_movements)
                pass_movement_count += len(goal_movements)
            if not pass_movement_count:
                break
            self.log.info(
                "Pass %s moved %s replicas",
                pass_number,
                pass_movement_count,
            )
        else:
            self.log.warning(
                "Goals still moving replicas after %s passes",
                MAX_OPTIMIZATION_PASSES,
            )

        goal_reports = []
        for index, (priority, goal) in enumerate(goals):
            report = GoalReport(
                priority,
                goal.name,
                goal.is_hard_goal,
                goal.is_goal_satisfied_after_optimization(cluster_model, self.constraint),
                movement_counts[index],
                imbalances_before[index],
                goal.imbalance(cluster_model, self.constraint),
            )
            goal_reports.append(report)
            self.log.info(
                "Finished %s with %s movements, imbalance %s, satisfied: %s",
                goal.name,
                report.movement_count,
                report.imbalance_after,
                report.satisfied,
            )

        final_assignment = cluster_model.assignment
        proposals = OrderedDict(
            (partition, replicas)
            for partition, replicas in final_assignment.items()
            if replicas != initial_assignment[partition]
        )
        self.log.info(
            "Optimization finished: %s movements, %s partitions changed",
            len(movements),
            len(proposals),
        )
        return OptimizerResult(
            OptimizerState.SUCCESS,
            movements,
            goal_reports,
            proposals,
            assignment_to_plan(proposals),
        )

    def _optimize_goal(
        self,
        cluster_model: ClusterModel,
        priority: int,
        goal: Goal,
        higher_goals: list[Goal],
        excluded: frozenset[int],
        pass_number: int,
    ) -> list[ReplicaMovement]:
        """Run a single goal, restoring the placement it started from if it
        fails or breaks a satisfied goal of higher priority.
        """
        snapshot = cluster_model.assignment
        satisfied_goals = [
            higher for higher in higher_goals
            if higher.is_goal_satisfied_after_optimization(cluster_model, self.constraint)
        ]
        self.log.log(
            logging.INFO if pass_number == 1 else logging.DEBUG,
            "Optimizing %s (priority %s, %s), pass %s, imbalance %s",
            goal.name,
            priority,
            'hard' if goal.is_hard_goal else 'soft',
            pass_number,
            goal.imbalance(cluster_model, self.constraint),
        )
        try:
            goal_movements = goal.optimize(
                cluster_model,
                self.constraint,
                excluded,
                tuple(higher_goals),
            )
        except OptimizationFailure as e:
            self.log.error(
                "Goal %s failed: %s. Restoring the placement it started from.",
                goal.name,
                e.reason,
            )
            cluster_model.restore(snapshot)
            raise

        for previous in satisfied_goals:
            if not previous.is_goal_satisfied_after_optimization(cluster_model, self.constraint):
                self.log.error(
                    "Goal %s broke the already satisfied goal %s",
                    goal.name,
                    previous.name,
                )
                cluster_model.restore(snapshot)
                raise GoalConsistencyError(goal.name, previous.name)
        return goal_movements
