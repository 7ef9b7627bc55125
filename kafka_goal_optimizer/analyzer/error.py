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

from enum import Enum

from kafka_goal_optimizer.util.error import GoalOptimizerError


class OptimizerState(Enum):
    """Terminal state of an optimization run."""
    SUCCESS = 'success'
    HARD_GOAL_INFEASIBLE = 'hard_goal_infeasible'
    SELF_HEALING_INFEASIBLE = 'self_healing_infeasible'
    GOAL_CONSISTENCY_ERROR = 'goal_consistency_error'


class OptimizationFailure(GoalOptimizerError):
    """Raised when a goal cannot reach its target state.

    :param goal_name: name of the failing goal
    :param reason: human readable description of the failure
    :param state: HARD_GOAL_INFEASIBLE, or SELF_HEALING_INFEASIBLE when the
        replicas of a dead broker could not be moved away
    :param broker_id: offending broker, if any
    :param partition: offending (topic, partition), if any
    """

    def __init__(
        self,
        goal_name: str,
        reason: str,
        state: OptimizerState = OptimizerState.HARD_GOAL_INFEASIBLE,
        broker_id: int | None = None,
        partition: tuple[str, int] | None = None,
    ) -> None:
        super().__init__(f"{goal_name}: {reason}")
        self.goal_name = goal_name
        self.reason = reason
        self.state = state
        self.broker_id = broker_id
        self.partition = partition


class GoalConsistencyError(GoalOptimizerError):
    """Raised when the moves of a goal broke a goal of higher priority that
    was already satisfied.
    """

    state = OptimizerState.GOAL_CONSISTENCY_ERROR

    def __init__(self, goal_name: str, broken_goal_name: str) -> None:
        super().__init__(
            "Goal {goal} violated the already satisfied goal {broken}".format(
                goal=goal_name,
                broken=broken_goal_name,
            )
        )
        self.goal_name = goal_name
        self.broken_goal_name = broken_goal_name
