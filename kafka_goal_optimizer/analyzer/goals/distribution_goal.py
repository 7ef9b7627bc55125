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
from collections.abc import Hashable
from collections.abc import Sequence
from typing import Any

from .goal import BALANCE_TOLERANCE
from .goal import distance
from .goal import Goal
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.cluster_model.broker import Broker
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement
from kafka_goal_optimizer.cluster_model.replica import Replica
from kafka_goal_optimizer.cluster_model.resource import EPSILON


class DistributionGoal(Goal):
    """Soft goal keeping a per-broker quantity inside a window around the
    cluster average.

    The quantity may be split in independent dimensions (one per topic for
    instance). The imbalance of a dimension is the distance of every alive
    broker from its window plus the whole quantity still held by dead
    brokers. The window only depends on cluster totals, which relocations
    conserve, so it is computed once per call.

    The goal only moves a replica when the move strictly reduces its
    imbalance, and accepts the moves of other goals as long as they do not
    increase it.
    """

    is_hard_goal = False

    def _dimensions(self, cluster_model: ClusterModel) -> list[Hashable]:
        return [None]

    def _replica_dimension(self, replica: Replica) -> Hashable:
        return None

    def _broker_value(self, broker: Broker, dimension: Hashable) -> float:
        raise NotImplementedError("Implement in subclass")

    def _replica_value(self, replica: Replica) -> float:
        raise NotImplementedError("Implement in subclass")

    def _broker_replicas(self, broker: Broker, dimension: Hashable) -> list[Replica]:
        return broker.replicas

    def _limits(self, cluster_model: ClusterModel, constraint: BalancingConstraint, dimension: Hashable) -> Any:
        """Precomputed bounds handed to _window."""
        raise NotImplementedError("Implement in subclass")

    def _window(self, broker: Broker, limits: Any) -> tuple[float, float]:
        raise NotImplementedError("Implement in subclass")

    def _broker_imbalance(self, broker: Broker, value: float, limits: Any) -> float:
        if not broker.alive:
            return value
        low, high = self._window(broker, limits)
        return distance(value, low, high)

    def _move_delta(self, replica: Replica, destination: Broker, limits: Any) -> float:
        """Change of imbalance if replica moved to destination."""
        dimension = self._replica_dimension(replica)
        source = replica.broker
        value = self._replica_value(replica)
        source_value = self._broker_value(source, dimension)
        destination_value = self._broker_value(destination, dimension)
        before = (
            self._broker_imbalance(source, source_value, limits) +
            self._broker_imbalance(destination, destination_value, limits)
        )
        after = (
            self._broker_imbalance(source, source_value - value, limits) +
            self._broker_imbalance(destination, destination_value + value, limits)
        )
        return after - before

    def accepts(self, replica, destination, cluster_model, constraint):
        if not self._replica_value(replica):
            return True
        limits = self._limits(cluster_model, constraint, self._replica_dimension(replica))
        return self._move_delta(replica, destination, limits) <= EPSILON

    def imbalance(self, cluster_model, constraint):
        return math.fsum(
            self._dimension_imbalance(cluster_model, constraint, dimension)
            for dimension in self._dimensions(cluster_model)
        )

    def _dimension_imbalance(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        dimension: Hashable,
    ) -> float:
        limits = self._limits(cluster_model, constraint, dimension)
        return math.fsum(
            self._broker_imbalance(broker, self._broker_value(broker, dimension), limits)
            for broker in cluster_model.brokers.values()
        )

    def _is_satisfied(self, cluster_model, constraint):
        return self.imbalance(cluster_model, constraint) <= BALANCE_TOLERANCE

    def _rebalance(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> list[ReplicaMovement]:
        movements = []
        for dimension in self._dimensions(cluster_model):
            limits = self._limits(cluster_model, constraint, dimension)
            while True:
                movement = self._next_movement(
                    cluster_model,
                    constraint,
                    dimension,
                    limits,
                    excluded,
                    optimized_goals,
                )
                if movement is None:
                    break
                movements.append(movement)
        return movements

    def _next_movement(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        dimension: Hashable,
        limits: Any,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> ReplicaMovement | None:
        """Apply the first move strictly reducing the imbalance of dimension.

        Brokers above their window shed replicas first, biggest brokers
        first. Then brokers below their window pull replicas from the
        biggest brokers.
        """
        alive = cluster_model.alive_brokers()

        def ratio(broker: Broker) -> float:
            _, high = self._window(broker, limits)
            value = self._broker_value(broker, dimension)
            return value / high if high else value

        by_value_desc = sorted(alive, key=lambda b: (-ratio(b), b.id))
        by_value_asc = sorted(alive, key=lambda b: (ratio(b), b.id))

        for source in by_value_desc:
            _, high = self._window(source, limits)
            if self._broker_value(source, dimension) <= high:
                continue
            destinations = [
                b for b in by_value_asc
                if b is not source and b.id not in excluded
            ]
            movement = self._try_moves(
                source,
                destinations,
                cluster_model,
                constraint,
                dimension,
                limits,
                optimized_goals,
            )
            if movement is not None:
                return movement

        for destination in by_value_asc:
            low, _ = self._window(destination, limits)
            if self._broker_value(destination, dimension) >= low:
                continue
            if destination.id in excluded:
                continue
            for source in by_value_desc:
                if source is destination:
                    continue
                movement = self._try_moves(
                    source,
                    [destination],
                    cluster_model,
                    constraint,
                    dimension,
                    limits,
                    optimized_goals,
                )
                if movement is not None:
                    return movement
        return None

    def _try_moves(
        self,
        source: Broker,
        destinations: list[Broker],
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        dimension: Hashable,
        limits: Any,
        optimized_goals: Sequence[Goal],
    ) -> ReplicaMovement | None:
        replicas = sorted(
            (
                r for r in self._broker_replicas(source, dimension)
                if self._replica_value(r) > 0
            ),
            key=lambda r: (-self._replica_value(r), r.partition.name),
        )
        for replica in replicas:
            for destination in destinations:
                if destination.hosts(replica.partition):
                    continue
                if self._move_delta(replica, destination, limits) >= -EPSILON:
                    continue
                if all(
                    goal.accepts(replica, destination, cluster_model, constraint)
                    for goal in optimized_goals
                ):
                    return self._relocate(cluster_model, replica, destination)
        return None
