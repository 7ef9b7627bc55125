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
from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any

from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.analyzer.error import OptimizationFailure
from kafka_goal_optimizer.analyzer.error import OptimizerState
from kafka_goal_optimizer.cluster_model.broker import Broker
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement
from kafka_goal_optimizer.cluster_model.replica import Replica


# Highest imbalance for which a distribution goal is still satisfied
BALANCE_TOLERANCE = 1e-6


def distance(value: float, low: float, high: float) -> float:
    """Distance of value from the [low, high] window, 0 when inside."""
    if value > high:
        return value - high
    if value < low:
        return low - value
    return 0


class Goal:
    """Interface that is used to implement a balancing goal.

    A goal moves replicas until the cluster model reaches the state the goal
    describes. Goals are stateless: everything they need is read from the
    cluster model and the balancing constraint at each call, so the same
    instance can be used by several runs.

    Every optimization starts by moving the replicas away from dead brokers.
    Each relocation, including those, must be accepted by the goal itself and
    by every goal already optimized in the run.
    """

    is_hard_goal = True

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def optimize(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded_brokers: Iterable[int] | None = None,
        optimized_goals: Sequence[Goal] = (),
    ) -> list[ReplicaMovement]:
        """Move replicas of the cluster model to satisfy the goal.

        :param cluster_model: model mutated in place
        :param constraint: thresholds of the run
        :param excluded_brokers: ids of the brokers that must not receive
            replicas
        :param optimized_goals: goals of higher priority already optimized,
            whose state must be preserved
        :returns: the ordered list of relocations applied
        :raises: OptimizationFailure if dead brokers cannot be evacuated or,
            for hard goals, if the goal cannot be satisfied.
        """
        excluded = frozenset(excluded_brokers or ())
        movements = self._evacuate_dead_brokers(
            cluster_model,
            constraint,
            excluded,
            optimized_goals,
        )
        movements += self._rebalance(cluster_model, constraint, excluded, optimized_goals)
        if not self.is_goal_satisfied_after_optimization(cluster_model, constraint):
            if self.is_hard_goal:
                self.log.error(
                    "Unable to satisfy %s, imbalance left %s",
                    self.name,
                    self.imbalance(cluster_model, constraint),
                )
                raise OptimizationFailure(
                    self.name,
                    "goal not satisfied after optimization",
                    OptimizerState.HARD_GOAL_INFEASIBLE,
                )
            self.log.warning(
                "Soft goal %s left unsatisfied, imbalance %s",
                self.name,
                self.imbalance(cluster_model, constraint),
            )
        return movements

    def is_goal_satisfied_after_optimization(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
    ) -> bool:
        """Return True if the cluster model is in the state the goal
        describes. Dead brokers hosting replicas never satisfy a goal.
        """
        if any(not broker.empty() for broker in cluster_model.dead_brokers()):
            return False
        return self._is_satisfied(cluster_model, constraint)

    def accepts(
        self,
        replica: Replica,
        destination: Broker,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
    ) -> bool:
        """Return True if moving replica to destination keeps the state
        reached by this goal.
        """
        raise NotImplementedError("Implement in subclass")

    def imbalance(self, cluster_model: ClusterModel, constraint: BalancingConstraint) -> float:
        """Distance of the cluster model from the state the goal describes.
        Zero when the goal is satisfied.
        """
        raise NotImplementedError("Implement in subclass")

    def _is_satisfied(self, cluster_model: ClusterModel, constraint: BalancingConstraint) -> bool:
        raise NotImplementedError("Implement in subclass")

    def _rebalance(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> list[ReplicaMovement]:
        """Goal specific relocations, run once the dead brokers are empty."""
        raise NotImplementedError("Implement in subclass")

    def _destination_key(self, broker: Broker, constraint: BalancingConstraint) -> Any:
        """Preference order of destination brokers, lowest first. Ties are
        broken by broker id.
        """
        return broker.replica_count

    def _evacuation_order(self, replicas: list[Replica]) -> list[Replica]:
        return sorted(replicas, key=lambda r: r.partition.name)

    def _evacuate_dead_brokers(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> list[ReplicaMovement]:
        movements = []
        for broker in cluster_model.dead_brokers():
            if broker.empty():
                continue
            self.log.info(
                "Moving %s replicas away from dead broker %s",
                broker.replica_count,
                broker.id,
            )
            for replica in self._evacuation_order(broker.replicas):
                destination = self._select_destination(
                    replica,
                    cluster_model,
                    constraint,
                    excluded,
                    optimized_goals,
                )
                if destination is None:
                    self.log.error(
                        "No eligible destination for %s hosted on dead broker %s",
                        replica,
                        broker.id,
                    )
                    raise OptimizationFailure(
                        self.name,
                        "no eligible destination for {replica} hosted on dead "
                        "broker {broker_id}".format(replica=replica, broker_id=broker.id),
                        OptimizerState.SELF_HEALING_INFEASIBLE,
                        broker_id=broker.id,
                        partition=replica.partition.name,
                    )
                movements.append(self._relocate(cluster_model, replica, destination))
        return movements

    def eligible_destinations(
        self,
        replica: Replica,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
    ) -> list[Broker]:
        """Alive, not excluded brokers not hosting the partition of replica,
        in preference order.
        """
        candidates = [
            broker for broker in cluster_model.alive_brokers()
            if broker.id not in excluded and not broker.hosts(replica.partition)
        ]
        return sorted(
            candidates,
            key=lambda b: (self._destination_key(b, constraint), b.id),
        )

    def _select_destination(
        self,
        replica: Replica,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> Broker | None:
        for destination in self.eligible_destinations(replica, cluster_model, constraint, excluded):
            if self._can_move(replica, destination, cluster_model, constraint, optimized_goals):
                return destination
        return None

    def _can_move(
        self,
        replica: Replica,
        destination: Broker,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        optimized_goals: Sequence[Goal],
    ) -> bool:
        if not self.accepts(replica, destination, cluster_model, constraint):
            return False
        return all(
            goal.accepts(replica, destination, cluster_model, constraint)
            for goal in optimized_goals
        )

    def _relocate(self, cluster_model: ClusterModel, replica: Replica, destination: Broker) -> ReplicaMovement:
        movement = cluster_model.relocate_replica(
            replica.partition.name,
            replica.broker.id,
            destination.id,
        )
        self.log.debug("%s moved %s", self.name, movement)
        return movement

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{self.name}()"
