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
from collections.abc import Sequence

from .goal import Goal
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.analyzer.error import OptimizationFailure
from kafka_goal_optimizer.analyzer.error import OptimizerState
from kafka_goal_optimizer.cluster_model.broker import Broker
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement
from kafka_goal_optimizer.cluster_model.replica import Replica
from kafka_goal_optimizer.cluster_model.resource import EPSILON
from kafka_goal_optimizer.cluster_model.resource import Resource


class CapacityGoal(Goal):
    """Hard goal keeping a per-broker quantity under a limit.

    Subclasses define the quantity a broker carries, the share of it a
    replica brings along and the limit. The most loaded broker above its
    limit sheds replicas to the least loaded brokers until every broker is
    under its limit, or one of them cannot shed anything.
    """

    is_hard_goal = True

    def _broker_value(self, broker: Broker) -> float:
        raise NotImplementedError("Implement in subclass")

    def _replica_value(self, replica: Replica) -> float:
        raise NotImplementedError("Implement in subclass")

    def _limit(self, broker: Broker, constraint: BalancingConstraint) -> float:
        raise NotImplementedError("Implement in subclass")

    def _excess(self, broker: Broker, constraint: BalancingConstraint) -> float:
        return self._broker_value(broker) - self._limit(broker, constraint)

    def _destination_key(self, broker, constraint):
        return self._broker_value(broker) / self._limit(broker, constraint)

    def _evacuation_order(self, replicas):
        # Biggest first leaves the small replicas to fill the gaps
        return sorted(replicas, key=lambda r: (-self._replica_value(r), r.partition.name))

    def accepts(self, replica, destination, cluster_model, constraint):
        value = self._replica_value(replica)
        if not value:
            return True
        return self._broker_value(destination) + value <= self._limit(destination, constraint)

    def imbalance(self, cluster_model, constraint):
        return math.fsum(
            self._broker_value(broker) if not broker.alive
            else max(0.0, self._excess(broker, constraint))
            for broker in cluster_model.brokers.values()
        )

    def _is_satisfied(self, cluster_model, constraint):
        return all(
            self._excess(broker, constraint) <= EPSILON
            for broker in cluster_model.alive_brokers()
        )

    def _rebalance(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> list[ReplicaMovement]:
        movements = []
        while True:
            over_limit = [
                broker for broker in cluster_model.alive_brokers()
                if self._excess(broker, constraint) > EPSILON
            ]
            if not over_limit:
                return movements
            source = min(
                over_limit,
                key=lambda b: (-self._broker_value(b) / self._limit(b, constraint), b.id),
            )
            movement = self._shed(source, cluster_model, constraint, excluded, optimized_goals)
            if movement is None:
                self.log.error(
                    "Broker %s is %s above its limit and none of its replicas can move",
                    source.id,
                    self._excess(source, constraint),
                )
                raise OptimizationFailure(
                    self.name,
                    "broker {broker_id} above limit {limit} and no replica can "
                    "be moved".format(
                        broker_id=source.id,
                        limit=self._limit(source, constraint),
                    ),
                    OptimizerState.HARD_GOAL_INFEASIBLE,
                    broker_id=source.id,
                )
            movements.append(movement)

    def _shed(
        self,
        source: Broker,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> ReplicaMovement | None:
        """Move one replica of source to the least loaded broker accepting it.

        Replicas big enough to fix the broker alone are tried first, smallest
        first, then the others biggest first.
        """
        excess = self._excess(source, constraint)
        replicas = [r for r in source.replicas if self._replica_value(r) > 0]
        sufficient = sorted(
            (r for r in replicas if self._replica_value(r) >= excess),
            key=lambda r: (self._replica_value(r), r.partition.name),
        )
        partial = sorted(
            (r for r in replicas if self._replica_value(r) < excess),
            key=lambda r: (-self._replica_value(r), r.partition.name),
        )
        for replica in sufficient + partial:
            destination = self._select_destination(
                replica,
                cluster_model,
                constraint,
                excluded,
                optimized_goals,
            )
            if destination is not None:
                return self._relocate(cluster_model, replica, destination)
        return None


class ResourceCapacityGoal(CapacityGoal):
    """Keep the load of a resource on every broker under
    capacity * capacity_threshold.
    """

    resource: Resource

    def _broker_value(self, broker):
        return broker.load(self.resource)

    def _replica_value(self, replica):
        return replica.load[self.resource]

    def _limit(self, broker, constraint):
        return constraint.capacity_limit(broker, self.resource)


class CpuCapacityGoal(ResourceCapacityGoal):
    resource = Resource.CPU


class DiskCapacityGoal(ResourceCapacityGoal):
    resource = Resource.DISK


class NetworkInboundCapacityGoal(ResourceCapacityGoal):
    resource = Resource.NW_IN


class NetworkOutboundCapacityGoal(ResourceCapacityGoal):
    resource = Resource.NW_OUT
